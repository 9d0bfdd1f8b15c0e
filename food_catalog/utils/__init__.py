"""Utility helpers (text normalization, classification, resources)."""
