"""repo-context - structured repository context for humans and coding agents."""

__version__ = "0.1.0"
