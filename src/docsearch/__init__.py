"""DocSearch: ranked full-text search over local HTML documentation."""

__version__ = "0.1.0"
