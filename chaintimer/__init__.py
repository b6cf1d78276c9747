"""ChainTimer: timed chains of tasks repeated over rounds."""

__version__ = "0.1.0"
