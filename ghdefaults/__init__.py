"""ghdefaults: a GitHub App that applies default repository settings."""

__version__ = "0.1.0"
