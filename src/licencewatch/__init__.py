"""Licence compliance risk assessment for fleet operators."""

__version__ = "0.1.0"
