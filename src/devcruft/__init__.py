"""devcruft - reclaim disk space from development build artifacts."""

__version__ = "0.1.0"
