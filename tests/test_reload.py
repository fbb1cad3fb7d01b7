"""Tests for loading, hot reloading and rollback."""

import pytest

from hotclass.errors import (
    ClassRuntimeError,
    CompileError,
    DefinitionNotFound,
    InheritanceCycleError,
    MultipleInheritanceError,
)
from hotclass.system import ClassSystem, ClassSystemConfig


@pytest.fixture
def sources():
    """Class bodies keyed by script path; `dict.get` is a valid script loader."""
    return {}


@pytest.fixture
def system(sources):
    return ClassSystem(ClassSystemConfig(script_loader=sources.get))


def _record(system, name):
    return system.catalog.get_or_raise(name)


BASE_V1 = """
static.VERSION = 1

@meta.define
def greet(self):
    return "v1"
"""

BASE_V2 = """
static.VERSION = 2

@meta.define
def greet(self):
    return "v2"

@meta.define
def extra(self):
    return "extra"
"""


class TestFirstLoad:
    """Tests for lazily creating and loading classes."""

    def test_require_loads_once(self, system, sources):
        """Requiring a loaded class does not load it again."""
        sources["classes/A.py"] = "static.K = 1\n"
        system.require_class("A")
        system.require_class("A")

        assert system.find_class("A").K == 1
        assert _record(system, "A").load_count == 1

    def test_missing_definition(self, system):
        """A class without a source raises DefinitionNotFound."""
        with pytest.raises(DefinitionNotFound) as exc_info:
            system.require_class("ui.Missing")
        assert exc_info.value.path == "classes/ui/Missing.py"
        assert system.find_class("ui.Missing") is None

    def test_failed_first_load_leaves_nothing(self, system, sources):
        """A class whose first load fails is unreachable and can be retried."""
        sources["classes/Broken.py"] = "raise ValueError('boom')\n"
        with pytest.raises(ClassRuntimeError):
            system.require_class("Broken")

        assert system.find_class("Broken") is None
        assert "Broken" not in system.catalog
        assert not hasattr(system.namespace, "Broken")

        sources["classes/Broken.py"] = "static.FIXED = True\n"
        system.require_class("Broken")
        assert system.find_class("Broken").FIXED is True

    def test_superclass_loaded_on_demand(self, system, sources):
        """Inherit loads a superclass that was never required."""
        sources["classes/A.py"] = BASE_V1
        sources["classes/B.py"] = "Inherit('A')\n"
        system.require_class("B")

        assert "A" in system.catalog
        assert _record(system, "B").ancestors.names() == ["A"]

    def test_missing_superclass(self, system, sources):
        """A missing superclass fails the subclass load."""
        sources["classes/B.py"] = "Inherit('Nowhere')\n"
        with pytest.raises(DefinitionNotFound):
            system.require_class("B")
        assert system.find_class("B") is None

    def test_load_class_on_unknown_loads_once(self, system, sources):
        """load_class on a new class loads it exactly once."""
        sources["classes/A.py"] = "static.K = 1\n"
        system.load_class("A")
        assert _record(system, "A").load_count == 1

    def test_self_inheritance(self, system, sources):
        """Test a class that inherits from itself."""
        sources["classes/A.py"] = "Inherit('A')\n"
        with pytest.raises(InheritanceCycleError):
            system.require_class("A")

    def test_mutual_inheritance(self, system, sources):
        """Two classes inheriting from each other are both left unloaded."""
        sources["classes/A.py"] = "Inherit('B')\n"
        sources["classes/B.py"] = "Inherit('A')\n"
        with pytest.raises(InheritanceCycleError):
            system.require_class("A")
        assert system.find_class("A") is None
        assert system.find_class("B") is None
        assert len(system.catalog) == 0

    def test_mutual_inheritance_retry_is_still_a_cycle(self, system, sources):
        """Retrying a mutual cycle fails again instead of linking a class to itself."""
        sources["classes/A.py"] = "Inherit('B')\n"
        sources["classes/B.py"] = "Inherit('A')\n"
        for _ in range(2):
            with pytest.raises(InheritanceCycleError):
                system.require_class("A")
        assert system.find_class("A") is None
        assert system.find_class("B") is None

    def test_three_class_cycle(self, system, sources):
        """A three-class cycle is caught while the first class is still loading."""
        sources["classes/A.py"] = "Inherit('B')\n"
        sources["classes/B.py"] = "Inherit('C')\n"
        sources["classes/C.py"] = "Inherit('A')\n"
        with pytest.raises(InheritanceCycleError):
            system.require_class("A")
        assert list(system.catalog) == []

        sources["classes/C.py"] = "static.ROOT = True\n"
        system.require_class("A")
        assert _record(system, "A").ancestors.names() == ["B", "C"]
        assert _record(system, "C").subclasses == {"B": _record(system, "B")}

    def test_failed_first_load_on_base_exception(self, system, sources):
        """A body that exits the interpreter still leaves no half-built class behind."""
        sources["classes/A.py"] = "static.K = 1\nraise SystemExit(3)\n"
        with pytest.raises(SystemExit):
            system.require_class("A")
        assert system.find_class("A") is None


class TestRollback:
    """A failed reload leaves the class as it was."""

    def test_runtime_error_keeps_previous_definition(self, system, sources):
        """A body error restores the previous static members."""
        sources["classes/A.py"] = "static.K = 1\n"
        system.require_class("A")

        sources["classes/A.py"] = "static.K = 2\nraise ValueError('boom')\n"
        with pytest.raises(RuntimeError) as exc_info:
            system.load_class("A")

        assert isinstance(exc_info.value, ClassRuntimeError)
        assert system.find_class("A").K == 1
        assert _record(system, "A").load_count == 1

    def test_compile_error_keeps_previous_definition(self, system, sources):
        """A compile error keeps existing instances working."""
        sources["classes/A.py"] = BASE_V1
        system.require_class("A")
        instance = system.find_class("A")()

        sources["classes/A.py"] = "def broken(:\n"
        with pytest.raises(CompileError):
            system.load_class("A")

        assert instance.greet() == "v1"

    def test_missing_source_on_reload(self, system, sources):
        """A vanished source fails the reload without touching the class."""
        sources["classes/A.py"] = "static.K = 1\n"
        system.require_class("A")

        del sources["classes/A.py"]
        with pytest.raises(DefinitionNotFound):
            system.load_class("A")
        assert system.find_class("A").K == 1

    def test_chain_and_membership_restored(self, system, sources):
        """Rollback restores the chain and subclass membership."""
        sources["classes/A.py"] = BASE_V1
        sources["classes/X.py"] = "static.X = True\n"
        sources["classes/B.py"] = "Inherit('A')\nstatic.OWN = 'b'\n"
        system.require_class("B")
        system.require_class("X")

        sources["classes/B.py"] = "Inherit('X')\nraise RuntimeError('half way')\n"
        with pytest.raises(ClassRuntimeError):
            system.load_class("B")

        b = _record(system, "B")
        assert b.ancestors.names() == ["A"]
        assert b.superclass is _record(system, "A")
        assert _record(system, "A").subclasses == {"B": b}
        assert _record(system, "X").subclasses == {}
        assert system.find_class("B").OWN == "b"
        assert system.find_class("B").VERSION == 1

    def test_multiple_inheritance_rolls_back(self, system, sources):
        """A second Inherit during reload rolls back."""
        sources["classes/A.py"] = BASE_V1
        sources["classes/X.py"] = "pass\n"
        sources["classes/B.py"] = "Inherit('A')\n"
        system.require_class("B")

        sources["classes/B.py"] = "Inherit('A')\nInherit('X')\n"
        with pytest.raises(MultipleInheritanceError):
            system.load_class("B")

        assert _record(system, "B").ancestors.names() == ["A"]
        assert "B" in _record(system, "A").subclasses
        assert _record(system, "X").subclasses == {}

    def test_failed_reload_keeps_constructor(self, system, sources):
        """The restored class can still construct instances."""
        sources["classes/A.py"] = BASE_V1
        system.require_class("A")

        sources["classes/A.py"] = "raise ValueError\n"
        with pytest.raises(ClassRuntimeError):
            system.load_class("A")

        assert system.find_class("A")().greet() == "v1"

    @pytest.mark.parametrize("body", ["import sys\nsys.exit(1)\n", "raise KeyboardInterrupt\n"])
    def test_base_exception_rolls_back(self, system, sources, body):
        """Exceptions outside the Exception hierarchy still restore the previous class."""
        sources["classes/A.py"] = BASE_V1
        system.require_class("A")

        sources["classes/A.py"] = "static.K = 2\n" + body
        with pytest.raises(BaseException) as exc_info:
            system.load_class("A")

        assert not isinstance(exc_info.value, Exception)
        A = system.find_class("A")
        assert A.VERSION == 1
        assert A.get("K") is None
        assert A().greet() == "v1"
        assert _record(system, "A").load_count == 1


class TestCascade:
    """A successful reload reloads existing subclasses."""

    def test_subclass_sees_new_definition(self, system, sources):
        """Reloading a superclass reloads its subclasses."""
        sources["classes/A.py"] = BASE_V1
        sources["classes/B.py"] = "Inherit('A')\n"
        system.require_class("B")
        existing = system.find_class("B")()

        sources["classes/A.py"] = BASE_V2
        system.load_class("A")

        B = system.find_class("B")
        assert B.VERSION == 2
        assert B().greet() == "v2"
        assert existing.extra() == "extra"
        assert _record(system, "B").superclass is _record(system, "A")
        assert _record(system, "B").load_count == 2

    def test_cascade_reaches_grandchildren(self, system, sources):
        """The cascade is recursive."""
        sources["classes/A.py"] = BASE_V1
        sources["classes/B.py"] = "Inherit('A')\n"
        sources["classes/C.py"] = "Inherit('B')\n"
        system.require_class("C")

        sources["classes/A.py"] = BASE_V2
        system.load_class("A")

        assert system.find_class("C").VERSION == 2
        assert _record(system, "C").ancestors.names() == ["B", "A"]

    def test_overrides_survive_cascade(self, system, sources):
        """Subclass overrides win over the new superclass members."""
        sources["classes/A.py"] = BASE_V1
        sources["classes/B.py"] = "Inherit('A')\n@meta.define\ndef greet(self):\n    return 'b'\n"
        system.require_class("B")

        sources["classes/A.py"] = BASE_V2
        system.load_class("A")

        assert system.find_class("B")().greet() == "b"

    def test_member_added_without_reload_not_inherited(self, system, sources):
        """Members added at runtime reach subclasses only on their reload."""
        sources["classes/A.py"] = BASE_V1
        sources["classes/B.py"] = "Inherit('A')\n"
        system.require_class("B")

        _record(system, "A").dispatch["late"] = lambda self: "late"
        assert "late" not in _record(system, "B").dispatch

        system.load_class("B")
        assert system.find_class("B")().late() == "late"

    def test_cascade_is_fail_fast(self, system, sources):
        """A failing subclass stops the cascade; later siblings are not reloaded."""
        sources["classes/A.py"] = BASE_V1
        sources["classes/B.py"] = "Inherit('A')\n"
        sources["classes/C.py"] = "Inherit('A')\n"
        system.require_class("B")
        system.require_class("C")

        sources["classes/A.py"] = BASE_V2
        sources["classes/B.py"] = "Inherit('A')\nraise ValueError('broken child')\n"
        with pytest.raises(ClassRuntimeError, match="broken child"):
            system.load_class("A")

        a, b, c = (_record(system, name) for name in "ABC")
        assert a.load_count == 2
        assert system.find_class("A").VERSION == 2
        assert b.load_count == 1
        assert system.find_class("B").VERSION == 1
        assert c.load_count == 1
        assert set(a.subclasses) == {"B", "C"}
        assert b.superclass is a
        assert c.superclass is a

    def test_parent_failure_does_not_touch_children(self, system, sources):
        """A failed superclass reload does not cascade."""
        sources["classes/A.py"] = BASE_V1
        sources["classes/B.py"] = "Inherit('A')\n"
        system.require_class("B")

        sources["classes/A.py"] = "raise ValueError\n"
        with pytest.raises(ClassRuntimeError):
            system.load_class("A")

        assert _record(system, "B").load_count == 1
        assert _record(system, "A").subclasses == {"B": _record(system, "B")}


class TestReloadModified:
    """Tests for ClassSystem.reload_modified."""

    def test_only_changed_classes_reload(self, system, sources):
        """Only classes with a changed source and their subclasses reload."""
        sources["classes/A.py"] = BASE_V1
        sources["classes/B.py"] = "Inherit('A')\n"
        sources["classes/Other.py"] = "pass\n"
        system.require_class("B")
        system.require_class("Other")

        assert system.reload_modified() == []

        sources["classes/A.py"] = BASE_V2
        reloaded = system.reload_modified()

        assert set(reloaded) == {"A", "B"}
        assert _record(system, "A").load_count == 2
        assert _record(system, "B").load_count == 2
        assert _record(system, "Other").load_count == 1

    def test_vanished_source_is_kept(self, system, sources):
        """A class whose source disappeared is left alone."""
        sources["classes/A.py"] = "static.K = 1\n"
        system.require_class("A")

        del sources["classes/A.py"]
        assert system.reload_modified() == []
        assert system.find_class("A").K == 1

    def test_callback_sources(self, system, sources):
        """Changed callback sources count as modified."""
        def v1(static, meta, inherit, prop):
            static.K = 1

        def v2(static, meta, inherit, prop):
            static.K = 2

        sources["classes/A.py"] = v1
        system.require_class("A")
        sources["classes/A.py"] = v2

        assert system.reload_modified() == ["A"]
        assert system.find_class("A").K == 2
