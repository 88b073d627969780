"""Utility helpers (logging, payload normalization)."""
