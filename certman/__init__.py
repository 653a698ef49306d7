"""certman: a small local certificate authority for the command line."""

__version__ = "0.3.0"
