"""
Hold/decay accumulator that turns a noisy per-frame gesture signal into a
stable completion signal.

The counter grows by one on every frame where the gesture is detected and
shrinks by ``decay`` (floored at zero) on every frame where it is not, so a
single misdetection in either direction cannot flip the outcome. The caller
owns the counter and passes it in on every step.
"""
from ..models.data_models import HoldStep


DEFAULT_GROWTH = 1
DEFAULT_DECAY = 2


def _validate(counter: int, threshold: int) -> None:
    if threshold < 1:
        raise ValueError(f"Hold threshold must be at least 1, got {threshold}")
    if counter < 0:
        raise ValueError(f"Hold counter cannot be negative, got {counter}")


def hold_progress(counter: int, threshold: int) -> float:
    """Counter as a percentage of the threshold, clamped to 0-100"""
    _validate(counter, threshold)
    return min(100.0, max(0.0, 100.0 * counter / threshold))


def advance_hold(
    counter: int,
    active: bool,
    threshold: int,
    growth: int = DEFAULT_GROWTH,
    decay: int = DEFAULT_DECAY,
) -> HoldStep:
    """
    Feed one observed frame into the accumulator.

    Args:
        counter: Current hold counter (>= 0)
        active: Whether the gesture was detected on this frame
        threshold: Counter value that completes the challenge
        growth: Increment on an active frame
        decay: Decrement on an inactive frame

    Returns:
        HoldStep: New counter, progress percentage and whether the challenge
        completed on this frame. A completed step always carries counter 0.

    Raises:
        ValueError: On a threshold below 1 or negative counter/steps
    """
    _validate(counter, threshold)
    if growth < 0 or decay < 0:
        raise ValueError(f"Growth and decay must be non-negative, got {growth}/{decay}")

    if active:
        counter += growth
    else:
        counter = max(0, counter - decay)

    if counter >= threshold:
        return HoldStep(counter=0, progress_percent=0.0, completed=True)

    return HoldStep(
        counter=counter,
        progress_percent=hold_progress(counter, threshold),
        completed=False,
    )


def decay_hold(counter: int, threshold: int, decay: int = DEFAULT_DECAY) -> HoldStep:
    """Decay without an active/inactive observation (used for absent faces)"""
    return advance_hold(counter, False, threshold, decay=decay)
