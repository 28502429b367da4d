"""Composition root for API dependencies."""

from researchly.api.deps.container import ServiceContainer, get_container

__all__ = ["ServiceContainer", "get_container"]
