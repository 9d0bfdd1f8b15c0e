"""FatSecret food catalog crawler (discovery + extraction)."""

__version__ = "1.0.0"
