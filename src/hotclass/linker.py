"""Single-inheritance linking between class records."""

from __future__ import annotations

import logging

from hotclass.errors import InheritanceCycleError, MultipleInheritanceError
from hotclass.types import ClassRecord

logger = logging.getLogger(__name__)


def link(record: ClassRecord, superclass: ClassRecord) -> None:
    """Make ``record`` a direct subclass of ``superclass``.

    Members that ``record`` has not defined yet are seeded from the
    superclass. Anything the superclass gains later is only picked up when
    ``record`` is reloaded.

    Raises:
        MultipleInheritanceError: If ``record`` already has a parent.
        InheritanceCycleError: If ``record`` would become its own ancestor.
    """
    if record.ancestors:
        raise MultipleInheritanceError(
            f"Class '{record.full_name}' attempted to inherit from more than one parent "
            f"('{record.ancestors.nearest.full_name}' and '{superclass.full_name}'). "
            "Multiple inheritance is not supported."
        )
    if superclass is record or record in superclass.ancestors:
        raise InheritanceCycleError(
            f"Class '{record.full_name}' cannot inherit from '{superclass.full_name}': "
            "it would become its own ancestor"
        )

    record.ancestors.assign([superclass, *superclass.ancestors])
    superclass.subclasses[record.full_name] = record

    for key, value in superclass.dispatch.items():
        if key not in record.dispatch:
            record.dispatch[key] = value
    for key, value in superclass.static.items():
        if key not in record.static:
            record.static[key] = value
    for key, descriptor in superclass.properties.items():
        if key not in record.properties:
            record.properties[key] = descriptor

    logger.debug("Linked %s -> %s", record.full_name, " -> ".join(record.ancestors.names()))


def unlink(record: ClassRecord) -> None:
    """Detach ``record`` from its parent's subclass set."""
    superclass = record.ancestors.nearest
    if superclass is not None and superclass.subclasses.get(record.full_name) is record:
        del superclass.subclasses[record.full_name]
