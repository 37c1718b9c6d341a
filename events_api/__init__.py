"""HTTP CRUD service for scheduled events."""

__version__ = "0.1.0"
