"""HTTP-facing adapters for hosting services."""
