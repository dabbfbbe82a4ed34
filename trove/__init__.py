"""Trove — move dotfiles into one managed store and link them back into place."""

__version__ = "0.1.0"
