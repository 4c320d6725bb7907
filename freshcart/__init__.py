"""FreshCart grocery delivery marketplace"""

__version__ = "1.0.0"
