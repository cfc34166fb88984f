"""Todo API: a small CRUD service for todo items, secured with JWT bearer tokens."""

__version__ = "0.1.0"
