"""
Tests for the DryRunManager
"""
# Standard
from datetime import timedelta

# Local
from pkgop import constants, status
from pkgop.manager import DryRunManager, ManagerOptions
from pkgop.test_helpers.helpers import MockClusterClient, make_self_package

PERIOD = timedelta(seconds=0.05)


def get_conditions(client):
    return status.get_conditions(
        client.get_obj(constants.CLUSTER_PACKAGE_KIND, "package-operator")
    )


def test_reconcile_without_self_package():
    """Make sure a reconcile before the self package exists is a no-op"""
    client = MockClusterClient()
    manager = DryRunManager(ManagerOptions(), client, PERIOD, available_after=1)
    manager.reconcile()
    assert manager.reconcile_count == 0
    assert client.set_status.call_count == 0


def test_reconcile_reports_available_after_count():
    """Make sure the self package is Unpacked on the first reconcile and only
    Available after the configured number of reconciles
    """
    client = MockClusterClient(resources=[make_self_package()])
    manager = DryRunManager(ManagerOptions(), client, PERIOD, available_after=2)

    manager.reconcile()
    conditions = get_conditions(client)
    assert status.is_condition_true(constants.PACKAGE_UNPACKED_CONDITION, conditions)
    assert not status.is_condition_true(
        constants.PACKAGE_AVAILABLE_CONDITION, conditions
    )

    manager.reconcile()
    assert status.is_condition_true(
        constants.PACKAGE_AVAILABLE_CONDITION, get_conditions(client)
    )
    assert len(get_conditions(client)) == 2


def test_start_stop():
    """Make sure the manager thread runs until stopped and cannot restart"""
    client = MockClusterClient(resources=[make_self_package()])
    manager = DryRunManager(ManagerOptions(force_adoption=True), client, PERIOD)
    assert manager.start()
    assert manager.is_alive()
    assert not manager.wait(PERIOD.total_seconds() * 2)
    assert manager.reconcile_count >= 1

    manager.stop()
    assert manager.wait(5)
    assert not manager.is_alive()
    assert not manager.start()
    assert "force_adoption=True" in str(manager)


def test_config_defaults():
    """Make sure the library config supplies the defaults"""
    manager = DryRunManager(ManagerOptions(), MockClusterClient())
    assert manager.reconcile_period == timedelta(seconds=1)
    assert manager.available_after == 1
