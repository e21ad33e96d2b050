"""service-common: logging and cache adapters shared by hosting services."""

__version__ = "0.1.0"
