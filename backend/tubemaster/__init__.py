"""TubeMaster: content tools for YouTube creators."""

__version__ = "1.0.0"
