"""gitrelease: release workflow automation on top of git."""

__version__ = "0.3.0"
