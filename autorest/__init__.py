"""autorest - generic REST endpoints generated from SQLAlchemy models."""

__version__ = "1.0.0"
