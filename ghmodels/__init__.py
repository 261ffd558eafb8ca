"""List, inspect and chat with hosted AI models from the command line."""

__version__ = "0.1.0"