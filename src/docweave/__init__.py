"""docweave - compile Markdown documentation into portable component trees."""

__version__ = "0.1.0"
