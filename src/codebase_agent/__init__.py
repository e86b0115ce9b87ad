"""Codebase Agent - retrieval-augmented Q&A over source-code repositories."""

__version__ = "0.1.0"
