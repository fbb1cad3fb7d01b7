"""Process-wide registry of class records."""

from __future__ import annotations

import logging
from typing import Any, Iterator

from hotclass.names import Namespace, resolve_namespace, split_qualified_name
from hotclass.types import ClassRecord, DispatchTable, StaticTable

logger = logging.getLogger(__name__)


class Catalog:
    """Registry of every known class.

    Each record is reachable through three aliases: its full name, its
    static table and its dispatch table. The catalog starts empty and lives
    as long as the process.
    """

    def __init__(self, root: Any = None) -> None:
        self.root = root if root is not None else Namespace()
        self._by_name: dict[str, ClassRecord] = {}
        # Keyed by id(); records are never freed, so ids stay unique.
        self._by_handle: dict[int, ClassRecord] = {}

    def find(self, alias: Any) -> ClassRecord | None:
        """Return the record for a full name, static table or dispatch table.

        Never creates anything.
        """
        if isinstance(alias, ClassRecord):
            return alias if self._by_name.get(alias.full_name) is alias else None
        if isinstance(alias, str):
            return self._by_name.get(alias)
        if isinstance(alias, (StaticTable, DispatchTable)):
            return self._by_handle.get(id(alias))
        return None

    def get_or_raise(self, alias: Any) -> ClassRecord:
        """Return the record for ``alias``, raising KeyError if unknown."""
        record = self.find(alias)
        if record is None:
            raise KeyError(f"Class '{alias}' not found")
        return record

    def create(self, full_name: str) -> ClassRecord:
        """Create an empty record and publish its static table in its namespace.

        Raises:
            ValueError: If the class already exists.
            InvalidClassName: If ``full_name`` is not a dotted identifier.
        """
        if full_name in self._by_name:
            raise ValueError(f"Class '{full_name}' is already defined")

        segments = split_qualified_name(full_name)
        name = segments.pop()
        namespace = resolve_namespace(self.root, segments)

        record = ClassRecord(full_name=full_name, namespace=namespace)
        self._by_name[full_name] = record
        self._by_handle[id(record.static)] = record
        self._by_handle[id(record.dispatch)] = record
        setattr(namespace, name, record.static)

        logger.debug("Created class record %s", full_name)
        return record

    def discard(self, record: ClassRecord) -> None:
        """Forget a record whose first load failed."""
        if self._by_name.get(record.full_name) is not record:
            return
        del self._by_name[record.full_name]
        self._by_handle.pop(id(record.static), None)
        self._by_handle.pop(id(record.dispatch), None)
        if getattr(record.namespace, record.name, None) is record.static:
            delattr(record.namespace, record.name)
        logger.debug("Discarded class record %s", record.full_name)

    def names(self) -> list[str]:
        """List every registered class name, in creation order."""
        return list(self._by_name)

    def __contains__(self, alias: Any) -> bool:
        return self.find(alias) is not None

    def __iter__(self) -> Iterator[ClassRecord]:
        return iter(list(self._by_name.values()))

    def __len__(self) -> int:
        return len(self._by_name)
