"""Scheduling of periodic feed imports."""

from .service import ImportScheduler

__all__ = [
    "ImportScheduler",
]
