"""
TactJam server - tacton composition backend.
"""
__version__ = "1.0.0"
