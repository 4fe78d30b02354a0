"""List details screen state orchestration."""

__version__ = "0.1.0"
