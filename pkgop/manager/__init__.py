"""
Top-level manager imports and the lookup of the configured manager type
"""

# Standard
from typing import Callable, Type
import importlib
import inspect

# First Party
import alog

# Local
from .. import config
from ..cluster import ClusterClientBase
from ..exceptions import ConfigError, assert_config
from .base import ManagerBase, ManagerOptions
from .dry_run_manager import DryRunManager

log = alog.use_channel("MNGR")

# A manager factory builds the manager once the bootstrap has fixed its options
ManagerFactory = Callable[[ManagerOptions], ManagerBase]


def _is_manager_type(attr_val) -> bool:
    """Determine if a given attribute value is a concrete manager type"""
    return (
        isinstance(attr_val, type)
        and issubclass(attr_val, ManagerBase)
        and not inspect.isabstract(attr_val)
    )


def get_manager_type(module_name: str, class_name: str = "") -> Type[ManagerBase]:
    """Import the manager module and either extract the only ManagerBase
    subclass it defines or the one with the given name

    Args:
        module_name:  str
            The importable name of the module holding the manager
        class_name:  str
            The optional name of the manager class in the module

    Returns:
        manager_type:  Type[ManagerBase]
            The manager class to construct
    """
    assert_config(module_name, "No manager module configured (manager.module)")
    try:
        module = importlib.import_module(module_name)
    except ImportError as err:
        raise ConfigError(f"Cannot import manager module [{module_name}]") from err
    log.debug4(dir(module))

    if class_name:
        manager_type = getattr(module, class_name, None)
        assert_config(
            _is_manager_type(manager_type),
            f"Provided manager, {class_name}, is invalid",
        )
        log.debug3("Provided manager, %s, is valid", class_name)
        return manager_type

    log.debug3("Searching for all managers in [%s]...", module_name)
    manager_types = {
        attr_val
        for attr_val in vars(module).values()
        if _is_manager_type(attr_val) and attr_val.__module__ == module.__name__
    }
    assert_config(
        len(manager_types) == 1,
        f"Expected exactly one manager in [{module_name}], found {len(manager_types)}",
    )
    manager_type = manager_types.pop()
    log.debug2("Found Manager: %s", manager_type)
    return manager_type


def make_manager_factory(cluster_client: ClusterClientBase) -> ManagerFactory:
    """Get the factory for the manager selected by the library config"""
    if config.dry_run:
        log.info("Using DRY RUN manager")
        manager_type = DryRunManager
    else:
        manager_type = get_manager_type(
            config.manager.module, config.manager.class_name
        )

    def factory(options: ManagerOptions) -> ManagerBase:
        return manager_type(options=options, cluster_client=cluster_client)

    return factory
