"""PostureMCP — configuration drift and inventory posture scoring."""

__version__ = "0.1.0"
