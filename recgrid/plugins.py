import logging
from typing import TYPE_CHECKING, Any, Optional

from pluggy import HookimplMarker, HookspecMarker, PluginManager

if TYPE_CHECKING:
    from recgrid.cells import CellElement
    from recgrid.controller import TableState
    from recgrid.schema import FieldDescriptor


hook_spec = HookspecMarker("recgrid")
hook_impl = HookimplMarker("recgrid")

logger = logging.getLogger(__name__)


class SchemaHooks:
    """Hooks that take part in building the schema of a table."""

    @hook_spec(firstresult=True)
    def value_kind_for(self, annotation: Any) -> Optional[str]:
        """Choose the value kind of a field from its type annotation.

        Return None to let the default mapping decide.
        """
        raise NotImplementedError


class GridHooks:
    """Hooks related to the grid."""

    @hook_spec(firstresult=True)
    def make_field_cell(
        self, field: "FieldDescriptor", parent: Any
    ) -> Optional["CellElement"]:
        """Create the cell element for a field.

        Return None to let the host create its default editor.
        """
        raise NotImplementedError

    @hook_spec
    def table_loaded(self, table: "TableState") -> None:
        """Called after a table has been (re)built and published."""
        raise NotImplementedError


# The PluginManager for the recgrid project.
recgrid_pm = PluginManager("recgrid")
recgrid_pm.add_hookspecs(SchemaHooks)
recgrid_pm.add_hookspecs(GridHooks)

# Plugins declared as entry points in the `recgrid` group are loaded
# automatically:
#
# [project.entry-points.recgrid]
# colors = my_package.colors:ColorPlugin
#
recgrid_pm.load_setuptools_entrypoints("recgrid")


def safe_hook_call(hook_caller, *args, **kwargs):
    """Call every implementation of a hook, isolating their failures.

    An exception in one plugin is logged and does not prevent the other
    plugins from running.

    Returns:
        A tuple of two dictionaries, both keyed by plugin name: the results
        and the errors.
    """
    result_map = {}
    error_map = {}

    if hook_caller is None:
        return result_map, error_map

    for impl in hook_caller.get_hookimpls():
        try:
            result_map[impl.plugin_name] = impl.function(*args, **kwargs)
        except Exception as e:
            error_map[impl.plugin_name] = e
            logger.error(
                "Error in %s hook of the %s plugin",
                hook_caller.name,
                impl.plugin_name,
                exc_info=True,
            )

    return result_map, error_map
