"""Sales data loading from CSV into MongoDB and revenue analytics served over HTTP."""

__version__ = "0.1.0"
__all__ = ["__version__"]