"""Backends for the calibrated tests (CPU reference, optional torch GPU)."""
