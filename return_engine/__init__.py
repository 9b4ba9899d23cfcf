"""Real estate rate-of-return engine."""

__version__ = "0.1.0"
