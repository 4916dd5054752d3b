"""Generate and publish the JSON catalogs of an extension registry."""

__version__ = "1.0.0"
