"""CodeCraft: an AI coding mentor panel for the editor."""

__version__ = "0.1.0"
