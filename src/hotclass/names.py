"""Dotted class names, namespace containers and the name-to-path convention."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Iterator

from hotclass.errors import InvalidClassName
from hotclass.parsing import QualifiedNameParser

_parser: QualifiedNameParser | None = None


class Namespace(SimpleNamespace):
    """Container that static handles are published into.

    Nested namespaces are created on demand, so ``ui.controls.Button`` ends up
    reachable as ``root.ui.controls.Button``.
    """

    def __iter__(self) -> Iterator[str]:
        return iter(vars(self))

    def __getitem__(self, name: str) -> Any:
        return vars(self)[name]


def split_qualified_name(full_name: str) -> list[str]:
    """Split ``"ui.controls.Button"`` into ``["ui", "controls", "Button"]``.

    Raises:
        InvalidClassName: If any segment is not an identifier.
    """
    global _parser
    if not isinstance(full_name, str):
        raise InvalidClassName(f"Class name must be a string, got {type(full_name).__name__}")
    if _parser is None:
        _parser = QualifiedNameParser()
    try:
        return _parser.parse(full_name)
    except SyntaxError as e:
        raise InvalidClassName(f"Invalid class name '{full_name}': {e}") from e


def resolve_namespace(root: Any, segments: list[str]) -> Any:
    """Walk ``segments`` from ``root``, creating missing namespaces along the way."""
    visiting = root
    for segment in segments:
        child = getattr(visiting, segment, None)
        if child is None:
            child = Namespace()
            setattr(visiting, segment, child)
        visiting = child
    return visiting


def class_path(full_name: str, root: str = "classes", extension: str = ".py") -> str:
    """Return the script path holding the named class body.

    ``"a.b.C"`` maps to ``"classes/a/b/C.py"``.
    """
    segments = split_qualified_name(full_name)
    if root:
        segments = [root.rstrip("/"), *segments]
    return "/".join(segments) + extension
