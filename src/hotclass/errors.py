"""Exceptions raised by the class system."""

from __future__ import annotations


class ClassSystemError(Exception):
    """Base class for every error raised by hotclass."""


class InvalidClassName(ClassSystemError, ValueError):
    """A dotted class name contains a segment that is not an identifier."""


class DefinitionNotFound(ClassSystemError, LookupError):
    """The script loader has no class body for the requested class."""

    def __init__(self, full_name: str, path: str) -> None:
        super().__init__(
            f"Unable to open class definition for class '{full_name}' (path: '{path}')"
        )
        self.full_name = full_name
        self.path = path


class CompileError(ClassSystemError):
    """A class body could not be compiled."""

    def __init__(self, full_name: str, message: str) -> None:
        super().__init__(f"Error loading class '{full_name}': {message}")
        self.full_name = full_name


class ClassRuntimeError(ClassSystemError, RuntimeError):
    """A class body raised while it was being executed."""

    def __init__(self, full_name: str, message: str) -> None:
        super().__init__(f"Error executing class definition '{full_name}': {message}")
        self.full_name = full_name


class MultipleInheritanceError(ClassSystemError):
    """A class tried to inherit from more than one parent."""


class InheritanceCycleError(ClassSystemError):
    """A class would become its own ancestor."""


class BindingRevokedError(ClassSystemError):
    """Inherit or Property was called after its class body finished running."""
