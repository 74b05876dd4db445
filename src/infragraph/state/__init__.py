"""Persisted state of applied resources."""

from .models import ResourceState, StateFile
from .store import StateStore

__all__ = ["ResourceState", "StateFile", "StateStore"]
