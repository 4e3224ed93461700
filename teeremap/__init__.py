"""
teeremap - Tee sheet slot remapping engine.
"""

__version__ = "0.1.0"
