"""Instance construction, lifecycle dispatch and ancestry queries."""

from __future__ import annotations

from typing import Any, Callable, Iterable

from hotclass.catalog import Catalog
from hotclass.types import ClassRecord, Instance

INITIALIZER = "__init__"


def construct(record: ClassRecord, initializer: str, *args: Any, **kwargs: Any) -> Instance:
    """Create an instance of ``record`` and run its initializers top-down."""
    instance = Instance(record.dispatch)
    _invoke(_descending(record), instance, initializer, args, kwargs)
    return instance


def make_constructor(record: ClassRecord, initializer: str = INITIALIZER) -> Callable[..., Instance]:
    """Return the callable installed on ``record.static``."""

    def constructor(*args: Any, **kwargs: Any) -> Instance:
        return construct(record, initializer, *args, **kwargs)

    return constructor


def invoke_descending(
    catalog: Catalog, instance: Instance, method_name: str, *args: Any, **kwargs: Any
) -> None:
    """Call ``method_name`` from the farthest ancestor down to the instance's own class.

    Think of it as a constructor chain. An implementation inherited without
    being overridden runs once, not once per class that carries it.
    """
    record = _record_of(catalog, instance)
    _invoke(_descending(record), instance, method_name, args, kwargs)


def invoke_ascending(
    catalog: Catalog, instance: Instance, method_name: str, *args: Any, **kwargs: Any
) -> None:
    """Call ``method_name`` from the instance's own class up to the farthest ancestor.

    The destructor-chain mirror of :func:`invoke_descending`.
    """
    record = _record_of(catalog, instance)
    _invoke(_ascending(record), instance, method_name, args, kwargs)


def is_instance(catalog: Catalog, value: Any, class_ref: Any) -> bool:
    """Return True if ``value`` is an instance of ``class_ref`` or one of its subclasses."""
    if not isinstance(value, Instance):
        return False
    own = catalog.find(value._dispatch)
    target = catalog.find(class_ref)
    if own is None or target is None:
        return False
    return own is target or target in own.ancestors


def class_name(catalog: Catalog, value: Any) -> str:
    """Return the full class name of an instance, or the Python type name otherwise."""
    if isinstance(value, Instance):
        record = catalog.find(value._dispatch)
        if record is not None:
            return record.full_name
    return type(value).__name__


def _record_of(catalog: Catalog, instance: Instance) -> ClassRecord:
    if not isinstance(instance, Instance):
        raise TypeError(f"Expected a class instance, got {type(instance).__name__}")
    return catalog.get_or_raise(instance._dispatch)


def _descending(record: ClassRecord) -> list[ClassRecord]:
    return [*reversed(record.ancestors), record]


def _ascending(record: ClassRecord) -> list[ClassRecord]:
    return [record, *record.ancestors]


def _invoke(
    records: Iterable[ClassRecord],
    instance: Instance,
    method_name: str,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> None:
    last_func = None
    for record in records:
        func = record.dispatch.get(method_name)
        if func is None or func is last_func:
            continue
        func(instance, *args, **kwargs)
        last_func = func
