"""Generate PostgreSQL extensions from Go packages."""

__version__ = "0.1.0"
