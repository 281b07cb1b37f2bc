"""code-guardian: static source analysis with quality scores and metrics."""

__version__ = "0.1.0"
