"""ghpmu - keep GitHub issues and a Projects board in sync from the terminal."""

__version__ = "0.1.0"
