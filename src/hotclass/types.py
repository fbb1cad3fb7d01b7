"""Class records, member tables and instances for the hotclass runtime."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import FunctionType, MethodType
from typing import Any, Callable, Iterable, Iterator

PropertyKey = str | int

_MISSING = object()


@dataclass(frozen=True)
class PropertyDescriptor:
    """Accessors for one property of a class.

    A property without a setter is read-only: writes to it are ignored.
    """

    get: Callable[[Any], Any] | None = None
    set: Callable[[Any, Any], None] | None = None

    @property
    def read_only(self) -> bool:
        return self.set is None

    @classmethod
    def coerce(cls, value: PropertyDescriptor | Mapping[str, Any]) -> PropertyDescriptor:
        """Build a descriptor from a ``{"get": ..., "set": ...}`` mapping."""
        if isinstance(value, PropertyDescriptor):
            return value
        if isinstance(value, Mapping):
            unknown = set(value) - {"get", "set"}
            if unknown:
                raise ValueError(f"Unknown property accessor(s): {', '.join(sorted(unknown))}")
            return cls(get=value.get("get"), set=value.get("set"))
        raise TypeError(f"Property descriptor must be a mapping, got {type(value).__name__}")


class MemberTable:
    """A named table of class members.

    Members are reachable both as attributes (``static.PI``) and as items
    (``meta["__add__"]``). Dunder names should use item access, since
    attribute reads of names like ``__init__`` hit the table object itself.
    """

    __slots__ = ("_full_name", "_members")

    _kind = "members"

    def __init__(self, full_name: str) -> None:
        object.__setattr__(self, "_full_name", full_name)
        object.__setattr__(self, "_members", {})

    def __getattr__(self, name: str) -> Any:
        if name in MemberTable.__slots__:
            raise AttributeError(name)
        try:
            return self._members[name]
        except KeyError:
            raise AttributeError(f"'{self._full_name}' has no member '{name}'") from None

    def __setattr__(self, name: str, value: Any) -> None:
        self._members[name] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self._members[name]
        except KeyError:
            raise AttributeError(f"'{self._full_name}' has no member '{name}'") from None

    def __getitem__(self, key: PropertyKey) -> Any:
        return self._members[key]

    def __setitem__(self, key: PropertyKey, value: Any) -> None:
        self._members[key] = value

    def __delitem__(self, key: PropertyKey) -> None:
        del self._members[key]

    def __contains__(self, key: object) -> bool:
        return key in self._members

    def __iter__(self) -> Iterator[PropertyKey]:
        return iter(self._members)

    def __len__(self) -> int:
        return len(self._members)

    def __repr__(self) -> str:
        return f"<{self._kind} of {self._full_name}>"

    @property
    def full_name(self) -> str:
        return self._full_name

    def get(self, key: PropertyKey, default: Any = None) -> Any:
        return self._members.get(key, default)

    def keys(self) -> list[PropertyKey]:
        return list(self._members)

    def items(self) -> list[tuple[PropertyKey, Any]]:
        return list(self._members.items())

    def define(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Decorator storing ``func`` under its own name."""
        self._members[func.__name__] = func
        return func

    def snapshot(self) -> dict[PropertyKey, Any]:
        """Return a shallow copy of the members."""
        return dict(self._members)

    def update(self, members: Mapping[PropertyKey, Any]) -> None:
        self._members.update(members)

    def clear(self) -> None:
        self._members.clear()


class StaticTable(MemberTable):
    """Class-level handle: holds class functions and constants, and builds instances when called."""

    __slots__ = ("_constructor",)

    _kind = "static table"

    def __init__(self, full_name: str) -> None:
        super().__init__(full_name)
        object.__setattr__(self, "_constructor", None)

    def __getattr__(self, name: str) -> Any:
        if name == "_constructor":
            raise AttributeError(name)
        return super().__getattr__(name)

    def __call__(self, *args: Any, **kwargs: Any) -> Instance:
        if self._constructor is None:
            raise TypeError(f"Class '{self._full_name}' is not loaded")
        return self._constructor(*args, **kwargs)

    def bind_constructor(self, constructor: Callable[..., Instance]) -> None:
        object.__setattr__(self, "_constructor", constructor)

    def unbind(self) -> None:
        object.__setattr__(self, "_constructor", None)


class DispatchTable(MemberTable):
    """Per-instance behaviour table shared by every instance of a class.

    Implements the field access interface used by :class:`Instance`:
    :meth:`get_field` and :meth:`set_field`.
    """

    __slots__ = ("_properties",)

    _kind = "dispatch table"

    def __init__(self, full_name: str) -> None:
        super().__init__(full_name)
        object.__setattr__(self, "_properties", None)

    def __getattr__(self, name: str) -> Any:
        if name == "_properties":
            raise AttributeError(name)
        return super().__getattr__(name)

    def bind_properties(self, properties: dict[PropertyKey, PropertyDescriptor]) -> None:
        object.__setattr__(self, "_properties", properties)

    def unbind(self) -> None:
        object.__setattr__(self, "_properties", None)

    def hook(self, name: str) -> Callable[..., Any] | None:
        """Return the operator hook stored under ``name``, if any."""
        return self._members.get(name)

    def get_field(self, instance: Instance, key: PropertyKey) -> Any:
        """Resolve ``key`` on ``instance``: method, then property getter, then raw field."""
        member = self._members.get(key, _MISSING)
        if member is not _MISSING:
            if isinstance(member, FunctionType):
                return MethodType(member, instance)
            return member

        if self._properties:
            descriptor = self._properties.get(key)
            if descriptor is not None and descriptor.get is not None:
                return descriptor.get(instance)

        try:
            return instance._fields[key]
        except KeyError:
            raise AttributeError(
                f"'{self._full_name}' object has no attribute '{key}'"
            ) from None

    def set_field(self, instance: Instance, key: PropertyKey, value: Any) -> None:
        """Write ``key`` on ``instance``, honouring property setters."""
        if self._properties and key in self._properties:
            setter = self._properties[key].set
            if setter is not None:
                setter(instance, value)
            return
        instance._fields[key] = value


class Instance:
    """An object created by calling a class's static table.

    Holds raw fields plus a reference to its class's dispatch table; every
    attribute and item access goes through that table.
    """

    __slots__ = ("_dispatch", "_fields")

    def __init__(self, dispatch: DispatchTable) -> None:
        object.__setattr__(self, "_dispatch", dispatch)
        object.__setattr__(self, "_fields", {})

    def __getattr__(self, key: str) -> Any:
        if key in Instance.__slots__:
            raise AttributeError(key)
        return self._dispatch.get_field(self, key)

    def __setattr__(self, key: str, value: Any) -> None:
        self._dispatch.set_field(self, key, value)

    def __delattr__(self, key: str) -> None:
        try:
            del self._fields[key]
        except KeyError:
            raise AttributeError(key) from None

    def __getitem__(self, key: PropertyKey) -> Any:
        hook = self._dispatch.hook("__getitem__")
        if hook is not None:
            return hook(self, key)
        try:
            return self._dispatch.get_field(self, key)
        except AttributeError:
            raise KeyError(key) from None

    def __setitem__(self, key: PropertyKey, value: Any) -> None:
        hook = self._dispatch.hook("__setitem__")
        if hook is not None:
            hook(self, key, value)
        else:
            self._dispatch.set_field(self, key, value)

    def __str__(self) -> str:
        hook = self._dispatch.hook("__str__")
        if hook is not None:
            return hook(self)
        return self._dispatch.full_name

    def __repr__(self) -> str:
        hook = self._dispatch.hook("__repr__")
        if hook is not None:
            return hook(self)
        return f"<{self._dispatch.full_name} instance at 0x{id(self):x}>"

    def __hash__(self) -> int:
        hook = self._dispatch.hook("__hash__")
        if hook is not None:
            return hook(self)
        return object.__hash__(self)

    def __bool__(self) -> bool:
        hook = self._dispatch.hook("__bool__")
        if hook is not None:
            return hook(self)
        return True


# Binary hooks answer NotImplemented when missing so Python can try the other operand.
BINARY_HOOKS = (
    "__add__", "__sub__", "__mul__", "__matmul__", "__truediv__", "__floordiv__",
    "__mod__", "__pow__",
    "__radd__", "__rsub__", "__rmul__", "__rmatmul__", "__rtruediv__", "__rfloordiv__",
    "__rmod__", "__rpow__",
    "__eq__", "__lt__", "__le__", "__gt__", "__ge__",
)

UNARY_HOOKS = (
    "__neg__", "__pos__", "__abs__", "__len__", "__iter__", "__call__",
)


def _binary_hook(name: str) -> Callable[..., Any]:
    def forward(self: Instance, other: Any) -> Any:
        hook = self._dispatch.hook(name)
        if hook is None:
            return NotImplemented
        return hook(self, other)

    forward.__name__ = name
    return forward


def _unary_hook(name: str) -> Callable[..., Any]:
    def forward(self: Instance, *args: Any, **kwargs: Any) -> Any:
        hook = self._dispatch.hook(name)
        if hook is None:
            raise TypeError(f"'{self._dispatch.full_name}' object does not support {name}")
        return hook(self, *args, **kwargs)

    forward.__name__ = name
    return forward


for _name in BINARY_HOOKS:
    setattr(Instance, _name, _binary_hook(_name))
for _name in UNARY_HOOKS:
    setattr(Instance, _name, _unary_hook(_name))
del _name


class AncestorChain:
    """Nearest-first list of ancestors with a position index for O(1) membership."""

    def __init__(self, ancestors: Iterable[ClassRecord] = ()) -> None:
        self._ancestors: list[ClassRecord] = []
        self._positions: dict[str, int] = {}
        self.assign(ancestors)

    def assign(self, ancestors: Iterable[ClassRecord]) -> None:
        """Replace the chain and rebuild the index."""
        self._ancestors = list(ancestors)
        self._positions = {record.full_name: i for i, record in enumerate(self._ancestors)}

    def clear(self) -> None:
        self._ancestors = []
        self._positions = {}

    @property
    def nearest(self) -> ClassRecord | None:
        return self._ancestors[0] if self._ancestors else None

    def position(self, record: ClassRecord) -> int | None:
        """Return the position of ``record`` in the chain (0 = nearest), or None."""
        index = self._positions.get(getattr(record, "full_name", None))
        if index is None or self._ancestors[index] is not record:
            return None
        return index

    def names(self) -> list[str]:
        return [record.full_name for record in self._ancestors]

    def __contains__(self, record: object) -> bool:
        return self.position(record) is not None  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[ClassRecord]:
        return iter(self._ancestors)

    def __reversed__(self) -> Iterator[ClassRecord]:
        return reversed(self._ancestors)

    def __len__(self) -> int:
        return len(self._ancestors)

    def __getitem__(self, index: int) -> ClassRecord:
        return self._ancestors[index]

    def __repr__(self) -> str:
        return f"AncestorChain({self.names()!r})"


@dataclass(eq=False)
class ClassRecord:
    """Identity and mutable definition of one class.

    The record is never destroyed; each (re)load clears and refills its
    tables in place, so the static and dispatch handles stay stable.
    """

    full_name: str
    namespace: Any = field(default=None, repr=False)
    static: StaticTable = field(init=False, repr=False)
    dispatch: DispatchTable = field(init=False, repr=False)
    properties: dict[PropertyKey, PropertyDescriptor] = field(default_factory=dict, repr=False)
    ancestors: AncestorChain = field(default_factory=AncestorChain)
    subclasses: dict[str, ClassRecord] = field(default_factory=dict, repr=False)
    source: Any = field(default=None, repr=False)
    load_count: int = 0

    def __post_init__(self) -> None:
        self.static = StaticTable(self.full_name)
        self.dispatch = DispatchTable(self.full_name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "full_name" and "full_name" in self.__dict__:
            raise AttributeError("full_name cannot change after creation")
        super().__setattr__(name, value)

    @property
    def name(self) -> str:
        """Last segment of the full name."""
        return self.full_name.rpartition(".")[2]

    @property
    def superclass(self) -> ClassRecord | None:
        return self.ancestors.nearest

    def clear(self) -> None:
        """Empty every mutable table and the ancestor chain."""
        self.static.clear()
        self.dispatch.clear()
        self.properties.clear()
        self.ancestors.clear()
        self.subclasses.clear()


@dataclass
class ClassSnapshot:
    """Copy of a record's mutable state, taken before a reload."""

    static_members: dict[PropertyKey, Any]
    dispatch_members: dict[PropertyKey, Any]
    properties: dict[PropertyKey, PropertyDescriptor]
    ancestors: list[ClassRecord]
    subclasses: dict[str, ClassRecord]
    source: Any
    load_count: int

    @classmethod
    def capture(cls, record: ClassRecord) -> ClassSnapshot:
        return cls(
            static_members=record.static.snapshot(),
            dispatch_members=record.dispatch.snapshot(),
            properties=dict(record.properties),
            ancestors=list(record.ancestors),
            subclasses=dict(record.subclasses),
            source=record.source,
            load_count=record.load_count,
        )

    def restore(self, record: ClassRecord) -> None:
        """Write the snapshot back into a cleared ``record``."""
        record.static.update(self.static_members)
        record.dispatch.update(self.dispatch_members)
        record.properties.update(self.properties)
        record.ancestors.assign(self.ancestors)
        record.subclasses.update(self.subclasses)
        record.source = self.source
        record.load_count = self.load_count

        superclass = record.ancestors.nearest
        if superclass is not None:
            superclass.subclasses[record.full_name] = record
