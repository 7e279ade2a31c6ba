"""TuneScout - multi-provider music search aggregation."""

__version__ = "0.1.0"
