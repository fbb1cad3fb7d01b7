"""hotclass - hot-reloadable single-inheritance classes defined by loadable class bodies."""

from hotclass.catalog import Catalog
from hotclass.errors import (
    BindingRevokedError,
    ClassRuntimeError,
    ClassSystemError,
    CompileError,
    DefinitionNotFound,
    InheritanceCycleError,
    InvalidClassName,
    MultipleInheritanceError,
)
from hotclass.names import Namespace, class_path, split_qualified_name
from hotclass.system import (
    ClassSystem,
    ClassSystemConfig,
    class_name,
    default_system,
    find_class,
    invoke_method_ascending,
    invoke_method_descending,
    is_instance,
    load_class,
    reload_modified,
    require_class,
    set_custom_script_loader,
)
from hotclass.types import (
    AncestorChain,
    ClassRecord,
    DispatchTable,
    Instance,
    PropertyDescriptor,
    StaticTable,
)

__all__ = [
    # Main API
    "ClassSystem",
    "ClassSystemConfig",
    "default_system",
    "require_class",
    "find_class",
    "load_class",
    "reload_modified",
    "set_custom_script_loader",
    "class_name",
    "is_instance",
    "invoke_method_descending",
    "invoke_method_ascending",
    # Model
    "Catalog",
    "ClassRecord",
    "AncestorChain",
    "StaticTable",
    "DispatchTable",
    "Instance",
    "PropertyDescriptor",
    "Namespace",
    "class_path",
    "split_qualified_name",
    # Errors
    "ClassSystemError",
    "DefinitionNotFound",
    "CompileError",
    "ClassRuntimeError",
    "MultipleInheritanceError",
    "InheritanceCycleError",
    "InvalidClassName",
    "BindingRevokedError",
]

__version__ = "0.1.0"
