"""Job Feed Importer: pulls job listings from external feeds into a content store."""

__version__ = "1.0.0"
