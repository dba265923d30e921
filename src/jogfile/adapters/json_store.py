"""File-based JSON store adapters."""

import json
import logging
import os
import tempfile
from pathlib import Path

from jogfile.core.errors import StoreFailure, ValidationFailure
from jogfile.core.recurrence import RecurringTemplate
from jogfile.core.tasks import Task

from .memory_store import InMemoryTaskStore, InMemoryTemplateStore

logger = logging.getLogger(__name__)


def _load_records(path: Path) -> list[dict]:
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise StoreFailure(f"Failed to read {path}: {e}")
    if not isinstance(data, list):
        raise StoreFailure(f"Expected a list of records in {path}")
    return data


def _dump_records(path: Path, records: list[dict]) -> None:
    """Write records to a temp file and rename it over the target in one step."""
    try:
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        with os.fdopen(fd, "w") as f:
            json.dump(records, f, indent=2)
        os.replace(tmp, path)
    except OSError as e:
        raise StoreFailure(f"Failed to write {path}: {e}")


class JsonTaskStore(InMemoryTaskStore):
    """
    Task storage in a single JSON file.

    Implements TaskStore protocol. Every read loads the file and every write
    replaces it atomically, so nothing is cached between calls.
    """

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir).expanduser()
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.path = self.data_dir / "tasks.json"
        super().__init__()

    def _read(self) -> dict[str, Task]:
        try:
            tasks = [Task.from_dict(r) for r in _load_records(self.path)]
        except (KeyError, ValueError, ValidationFailure) as e:
            raise StoreFailure(f"Corrupt task record in {self.path}: {e}")
        return {t.id: t for t in tasks}

    def _write(self, tasks: dict[str, Task]) -> None:
        _dump_records(self.path, [t.to_dict() for t in tasks.values()])
        logger.debug(f"Wrote {len(tasks)} tasks to {self.path}")


class JsonTemplateStore(InMemoryTemplateStore):
    """Recurring template storage in a single JSON file. Implements TemplateStore protocol."""

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir).expanduser()
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.path = self.data_dir / "recurring.json"
        super().__init__()

    def _read(self) -> dict[str, RecurringTemplate]:
        try:
            templates = [RecurringTemplate.from_dict(r) for r in _load_records(self.path)]
        except (KeyError, ValueError, ValidationFailure) as e:
            raise StoreFailure(f"Corrupt template record in {self.path}: {e}")
        return {t.id: t for t in templates}

    def _write(self, templates: dict[str, RecurringTemplate]) -> None:
        _dump_records(self.path, [t.to_dict() for t in templates.values()])
        logger.debug(f"Wrote {len(templates)} templates to {self.path}")
