"""Key broker service building blocks and an administrative command line client."""

__version__ = "0.1.0"