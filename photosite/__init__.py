"""JSON API server for a photography portfolio: photos, tags, filters, views, likes and signed downloads."""

__version__ = "0.1.0"