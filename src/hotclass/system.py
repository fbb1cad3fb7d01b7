"""Public API of the class system."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from hotclass import runtime
from hotclass.catalog import Catalog
from hotclass.loader import ScriptLoader, read_script
from hotclass.names import Namespace
from hotclass.reload import ReloadManager
from hotclass.runtime import INITIALIZER
from hotclass.types import Instance, StaticTable

logger = logging.getLogger(__name__)


@dataclass
class ClassSystemConfig:
    """Settings for a :class:`ClassSystem`."""

    class_root: str = "classes"
    extension: str = ".py"
    initializer: str = INITIALIZER
    script_loader: ScriptLoader = read_script


class ClassSystem:
    """A catalog of hot-reloadable classes plus the operations on it.

    Example:
        system = ClassSystem(ClassSystemConfig(class_root="game/classes"))
        Vector2 = system.find_class("math.Vector2")  # None until loaded
        system.require_class("math.Vector2")
        v = system.namespace.math.Vector2(1, 2)
    """

    def __init__(self, config: ClassSystemConfig | None = None) -> None:
        self.config = config or ClassSystemConfig()
        self.catalog = Catalog()
        self.reloader = ReloadManager(
            self.catalog,
            script_loader=self.config.script_loader,
            class_root=self.config.class_root,
            extension=self.config.extension,
            initializer=self.config.initializer,
        )

    @property
    def namespace(self) -> Namespace:
        """Root namespace that every static table is published into."""
        return self.catalog.root

    def require_class(self, full_name: str) -> None:
        """Make sure the named class is loaded. Does nothing if it already is."""
        self.reloader.lookup_or_create(full_name)

    def find_class(self, class_ref: Any) -> StaticTable | None:
        """Return the static table of a known class (by name or handle), or None."""
        record = self.catalog.find(class_ref)
        return record.static if record is not None else None

    def load_class(self, full_name: str) -> None:
        """Load the named class, reloading it (and its subclasses) if already known."""
        self.reloader.load(full_name)

    def reload_modified(self) -> list[str]:
        """Reload every class whose source changed since it was last loaded.

        Classes whose source can no longer be found are left as they are.

        Returns:
            Names of the classes that were reloaded, cascades included.
        """
        load_counts = {record.full_name: record.load_count for record in self.catalog}
        for record in self.catalog:
            source = self.reloader.fetch(record)
            if source is None:
                logger.warning("Source for class %s is gone; keeping loaded definition", record.full_name)
                continue
            # A cascade from an earlier reload may already have picked it up.
            if source == record.source:
                continue
            self.reloader.load(record.full_name)
        return [
            record.full_name for record in self.catalog
            if record.full_name in load_counts and record.load_count != load_counts[record.full_name]
        ]

    def set_custom_script_loader(self, script_loader: ScriptLoader) -> None:
        """Replace the function that maps a script path to a class body."""
        self.reloader.set_script_loader(script_loader)

    def class_name(self, value: Any) -> str:
        return runtime.class_name(self.catalog, value)

    def is_instance(self, value: Any, class_ref: Any) -> bool:
        return runtime.is_instance(self.catalog, value, class_ref)

    def invoke_method_descending(self, instance: Instance, method_name: str, *args: Any, **kwargs: Any) -> None:
        runtime.invoke_descending(self.catalog, instance, method_name, *args, **kwargs)

    def invoke_method_ascending(self, instance: Instance, method_name: str, *args: Any, **kwargs: Any) -> None:
        runtime.invoke_ascending(self.catalog, instance, method_name, *args, **kwargs)


_default_system: ClassSystem | None = None


def default_system() -> ClassSystem:
    """Return the process-wide class system, creating it on first use."""
    global _default_system
    if _default_system is None:
        _default_system = ClassSystem()
    return _default_system


def require_class(full_name: str) -> None:
    default_system().require_class(full_name)


def find_class(class_ref: Any) -> StaticTable | None:
    return default_system().find_class(class_ref)


def load_class(full_name: str) -> None:
    default_system().load_class(full_name)


def reload_modified() -> list[str]:
    return default_system().reload_modified()


def set_custom_script_loader(script_loader: ScriptLoader) -> None:
    default_system().set_custom_script_loader(script_loader)


def class_name(value: Any) -> str:
    return default_system().class_name(value)


def is_instance(value: Any, class_ref: Any) -> bool:
    return default_system().is_instance(value, class_ref)


def invoke_method_descending(instance: Instance, method_name: str, *args: Any, **kwargs: Any) -> None:
    default_system().invoke_method_descending(instance, method_name, *args, **kwargs)


def invoke_method_ascending(instance: Instance, method_name: str, *args: Any, **kwargs: Any) -> None:
    default_system().invoke_method_ascending(instance, method_name, *args, **kwargs)
