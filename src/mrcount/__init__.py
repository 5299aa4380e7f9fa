"""
mrcount - a map/shuffle/reduce word count coordinator.
"""

__version__ = "0.1.0"
