"""
Tests for looking up the configured manager type
"""
# Standard
import sys
import types

# Third Party
import pytest

# First Party
import aconfig

# Local
from pkgop.exceptions import ConfigError
from pkgop.manager import (
    DryRunManager,
    ManagerBase,
    ManagerOptions,
    get_manager_type,
    make_manager_factory,
)
from pkgop.test_helpers.helpers import MockClusterClient, MockManager, library_config

## Helpers #####################################################################

SAMPLE_MODULE = "sample_pkgop_managers"


@pytest.fixture
def manager_module():
    """Register a throwaway module holding manager classes"""
    module = types.ModuleType(SAMPLE_MODULE)

    def add(name, base=MockManager):
        manager_type = type(name, (base,), {"__module__": SAMPLE_MODULE})
        setattr(module, name, manager_type)
        return manager_type

    module.add = add
    # Imported types do not count as defined by the module
    module.MockManager = MockManager
    module.ManagerBase = ManagerBase
    sys.modules[SAMPLE_MODULE] = module
    yield module
    del sys.modules[SAMPLE_MODULE]


## Tests #######################################################################


def test_single_manager_found(manager_module):
    """Make sure the only manager in the module is found"""
    first = manager_module.add("FirstManager")
    assert get_manager_type(SAMPLE_MODULE) is first


def test_named_manager_found(manager_module):
    """Make sure a named manager is picked out of several"""
    manager_module.add("FirstManager")
    second = manager_module.add("SecondManager")
    assert get_manager_type(SAMPLE_MODULE, "SecondManager") is second


def test_multiple_managers_without_name(manager_module):
    """Make sure several managers without a name is a ConfigError"""
    manager_module.add("FirstManager")
    manager_module.add("SecondManager")
    with pytest.raises(ConfigError, match="found 2"):
        get_manager_type(SAMPLE_MODULE)


def test_no_managers(manager_module):
    """Make sure a module without managers is a ConfigError"""
    with pytest.raises(ConfigError, match="found 0"):
        get_manager_type(SAMPLE_MODULE)


@pytest.mark.parametrize("class_name", ["Missing", "add", "ManagerBase"])
def test_invalid_named_manager(manager_module, class_name):
    """Make sure a name that is not a concrete manager is a ConfigError"""
    with pytest.raises(ConfigError, match="is invalid"):
        get_manager_type(SAMPLE_MODULE, class_name)


def test_missing_module():
    """Make sure an unimportable module is a ConfigError"""
    with pytest.raises(ConfigError, match="Cannot import"):
        get_manager_type("not_a_real_module_for_pkgop")


def test_no_module_configured():
    """Make sure an empty module name is a ConfigError"""
    with pytest.raises(ConfigError):
        get_manager_type("")


def test_factory_dry_run():
    """Make sure dry run always uses the DryRunManager"""
    client = MockClusterClient()
    with library_config(dry_run=True):
        manager = make_manager_factory(client)(ManagerOptions(force_adoption=True))
    assert isinstance(manager, DryRunManager)
    assert manager.cluster_client is client
    assert manager.options.force_adoption


def test_factory_configured_module(manager_module):
    """Make sure the configured module is used outside of dry run"""
    first = manager_module.add("FirstManager")
    with library_config(
        dry_run=False,
        manager=aconfig.Config(
            {"module": SAMPLE_MODULE, "class_name": ""}, override_env_vars=False
        ),
    ):
        manager = make_manager_factory(MockClusterClient())(ManagerOptions())
    assert isinstance(manager, first)
