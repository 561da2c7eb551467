"""Coverage threshold gate with JSON, HTML and badge reports."""

__version__ = "0.1.0"
