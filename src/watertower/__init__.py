"""Water tower simulator: two redundant pumps against a fixed set of consumers."""

__version__ = "0.1.0"
