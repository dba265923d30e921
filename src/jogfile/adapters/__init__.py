"""Adapters - I/O implementations of ports."""

from .memory_store import InMemoryTaskStore, InMemoryTemplateStore
from .json_store import JsonTaskStore, JsonTemplateStore

__all__ = [
    "InMemoryTaskStore",
    "InMemoryTemplateStore",
    "JsonTaskStore",
    "JsonTemplateStore",
]
