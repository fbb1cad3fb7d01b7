"""Running class bodies against a class record."""

from __future__ import annotations

import builtins
import logging
from collections.abc import Mapping
from typing import Any, Callable, Union

from hotclass.errors import (
    BindingRevokedError,
    ClassRuntimeError,
    ClassSystemError,
    CompileError,
)
from hotclass.linker import link
from hotclass.types import (
    ClassRecord,
    DispatchTable,
    PropertyDescriptor,
    PropertyKey,
    StaticTable,
)

logger = logging.getLogger(__name__)

# A class body is either source text or a callback taking
# (static, meta, inherit, define_property).
DefinitionCallback = Callable[
    [StaticTable, DispatchTable, Callable[[Any], None], Callable[..., None]], Any
]
ClassSource = Union[str, DefinitionCallback]


class ClassBody:
    """The bindings visible to one run of a class body.

    A fresh instance is made for every load and closed right after the body
    returns; ``Inherit`` and ``Property`` stop working once it is closed.
    """

    def __init__(self, record: ClassRecord, resolve: Callable[[Any], ClassRecord]) -> None:
        self.record = record
        self._resolve = resolve
        self._open = True

    @property
    def static(self) -> StaticTable:
        return self.record.static

    @property
    def meta(self) -> DispatchTable:
        return self.record.dispatch

    def inherit(self, superclass: Any) -> None:
        """Link the class under ``superclass`` (a full name or a static table)."""
        self._check_open("Inherit")
        link(self.record, self._resolve(superclass))

    def define_property(
        self,
        key: PropertyKey,
        descriptor: PropertyDescriptor | Mapping[str, Any] | None = None,
        *,
        get: Callable[[Any], Any] | None = None,
        set: Callable[[Any, Any], None] | None = None,
    ) -> None:
        """Register a property, either as a ``{"get", "set"}`` mapping or via keywords."""
        self._check_open("Property")
        if descriptor is None:
            descriptor = PropertyDescriptor(get=get, set=set)
        self.record.properties[key] = PropertyDescriptor.coerce(descriptor)

    def scope(self, path: str) -> dict[str, Any]:
        """Globals for executing class body text."""
        return {
            "__name__": self.record.full_name,
            "__file__": path,
            "__builtins__": builtins,
            "static": self.static,
            "meta": self.meta,
            "Inherit": self.inherit,
            "Property": self.define_property,
        }

    def close(self) -> None:
        self._open = False

    def _check_open(self, binding: str) -> None:
        if not self._open:
            raise BindingRevokedError(
                f"{binding} is only available while the body of '{self.record.full_name}' runs"
            )


def define(
    record: ClassRecord,
    source: ClassSource,
    path: str,
    resolve: Callable[[Any], ClassRecord],
) -> None:
    """Run ``source`` as the body of ``record``.

    Raises:
        CompileError: If the body text cannot be compiled.
        ClassRuntimeError: If the body raises while running.
        ClassSystemError: Raised by the body's own ``Inherit`` calls
            (for instance MultipleInheritanceError) propagate unchanged.
    """
    body = ClassBody(record, resolve)
    try:
        if callable(source):
            logger.debug("Running definition callback for %s", record.full_name)
            _execute(record, lambda: source(body.static, body.meta, body.inherit, body.define_property))
        else:
            logger.debug("Compiling %s from %s", record.full_name, path)
            try:
                code = compile(source, path, "exec")
            except (SyntaxError, ValueError) as e:
                raise CompileError(record.full_name, str(e)) from e
            _execute(record, lambda: exec(code, body.scope(path)))
    finally:
        body.close()


def _execute(record: ClassRecord, run: Callable[[], Any]) -> None:
    try:
        run()
    except ClassSystemError:
        raise
    except Exception as e:
        raise ClassRuntimeError(record.full_name, f"{type(e).__name__}: {e}") from e
