"""Adapters — tool bindings for the CLIs a backup run shells out to.

Public re-exports for convenient access.
"""

from dotbackup.adapters.base import Adapter, ExecutionContext
from dotbackup.adapters.mock import MockAdapter
from dotbackup.adapters.registry import AdapterRegistry, create_default_registry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
    "create_default_registry",
]
