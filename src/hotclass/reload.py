"""Loading, hot reloading and rollback of class definitions."""

from __future__ import annotations

import logging
from typing import Any

from hotclass.catalog import Catalog
from hotclass.definition import define
from hotclass.errors import DefinitionNotFound, InheritanceCycleError
from hotclass.linker import unlink
from hotclass.loader import ScriptLoader, read_script
from hotclass.names import class_path
from hotclass.runtime import INITIALIZER, make_constructor
from hotclass.types import ClassRecord, ClassSnapshot

logger = logging.getLogger(__name__)


class ReloadManager:
    """Single entry point for first loads and reloads.

    A failed (re)load leaves the class exactly as it was before the attempt;
    a successful reload cascades to the subclasses the class had beforehand.
    """

    def __init__(
        self,
        catalog: Catalog,
        script_loader: ScriptLoader = read_script,
        class_root: str = "classes",
        extension: str = ".py",
        initializer: str = INITIALIZER,
    ) -> None:
        self.catalog = catalog
        self.script_loader = script_loader
        self.class_root = class_root
        self.extension = extension
        self.initializer = initializer
        self._first_loads: set[str] = set()

    def set_script_loader(self, script_loader: ScriptLoader) -> None:
        """Replace the loader for every subsequent load."""
        self.script_loader = script_loader

    def path_for(self, full_name: str) -> str:
        return class_path(full_name, self.class_root, self.extension)

    def lookup_or_create(self, full_name: str) -> ClassRecord:
        """Return the named record, creating and loading it on first reference.

        If the first load fails the record is dropped again, so a class that
        never loaded cannot be found.
        """
        record = self.catalog.find(full_name)
        if record is not None:
            return record

        record = self.catalog.create(full_name)
        self._first_loads.add(full_name)
        try:
            self._load_record(record)
        except BaseException:
            self.catalog.discard(record)
            raise
        finally:
            self._first_loads.discard(full_name)
        return record

    def resolve(self, class_ref: Any) -> ClassRecord:
        """Resolve a superclass reference given to ``Inherit``.

        Raises:
            InheritanceCycleError: If the superclass is itself still in its
                first load.
        """
        record = self.catalog.find(class_ref)
        if record is None:
            if isinstance(class_ref, str):
                return self.lookup_or_create(class_ref)
            raise TypeError(f"Cannot inherit from {class_ref!r}: not a known class")
        if record.full_name in self._first_loads:
            raise InheritanceCycleError(
                f"Class '{record.full_name}' inherits from itself through a chain "
                "of classes that are still loading"
            )
        return record

    def load(self, full_name: str) -> ClassRecord:
        """Load the named class, or reload it if it already exists."""
        record = self.catalog.find(full_name)
        if record is None:
            return self.lookup_or_create(full_name)
        self._load_record(record)
        return record

    def fetch(self, record: ClassRecord) -> Any:
        """Fetch the current source of ``record`` from the script loader."""
        return self.script_loader(self.path_for(record.full_name))

    def _load_record(self, record: ClassRecord) -> None:
        path = self.path_for(record.full_name)
        source = self.script_loader(path)
        if source is None:
            raise DefinitionNotFound(record.full_name, path)

        is_reload = record.load_count > 0
        if is_reload:
            logger.info("Reloading class %s", record.full_name)
        else:
            logger.debug("Loading class %s from %s", record.full_name, path)

        snapshot = ClassSnapshot.capture(record)
        self._strip(record)
        self._initialize(record)
        try:
            define(record, source, path, self.resolve)
        except BaseException as e:
            self._strip(record)
            self._initialize(record)
            snapshot.restore(record)
            logger.warning("Rolled back class %s after failed load: %s", record.full_name, e)
            raise

        record.source = source
        record.load_count += 1

        # Existing subclasses still point at this record until they reload.
        for subclass in snapshot.subclasses.values():
            if subclass.ancestors.nearest is record:
                record.subclasses.setdefault(subclass.full_name, subclass)

        # Not transactional: a failing subclass stops the cascade.
        for subclass in snapshot.subclasses.values():
            logger.info("Cascading reload %s -> %s", record.full_name, subclass.full_name)
            self.load(subclass.full_name)

    def _strip(self, record: ClassRecord) -> None:
        unlink(record)
        record.static.unbind()
        record.dispatch.unbind()
        record.clear()

    def _initialize(self, record: ClassRecord) -> None:
        record.dispatch.bind_properties(record.properties)
        record.static.bind_constructor(make_constructor(record, self.initializer))
