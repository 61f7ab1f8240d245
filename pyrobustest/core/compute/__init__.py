"""Compute utilities shared by backends."""

from pyrobustest.core.compute.timing import Timer

__all__ = ["Timer"]
