"""
Challenge-based facial liveness verification
"""
__version__ = "0.1.0"
