"""Test helper utilities for job feed importer tests."""

from .fakes import InMemoryContentStore, InMemoryFeedStore
from .fixture_provider import FixtureProvider, make_raw_job

__all__ = ["InMemoryContentStore", "InMemoryFeedStore", "FixtureProvider", "make_raw_job"]
