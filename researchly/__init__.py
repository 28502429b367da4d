"""Researchly Assist realtime AI session and caching service."""

__version__ = "0.1.0"
