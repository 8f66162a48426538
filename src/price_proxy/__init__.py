"""Vendyz price proxy -- cached multi-source USD token pricing."""

__version__ = "0.1.0"
