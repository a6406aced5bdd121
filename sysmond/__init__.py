"""Linux CPU, load and disk statistics collectors, a per-second store and a stats stream."""

__version__ = "0.1.0"