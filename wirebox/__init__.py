"""Service definitions, service maps and validation of service definitions."""

__version__ = "0.1.0"