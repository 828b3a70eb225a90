"""dramacast - scheduled release pipeline for a short-drama catalog."""

__version__ = "0.1.0"
