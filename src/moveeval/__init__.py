"""moveeval – evaluation consensus and move-quality scoring for chess engines."""

__version__ = "0.1.0"
