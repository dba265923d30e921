"""Ports - interfaces/protocols for external dependencies."""

from .task_store import TaskStore
from .template_store import TemplateStore

__all__ = [
    "TaskStore",
    "TemplateStore",
]
