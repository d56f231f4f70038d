"""
Tests for the LifecycleCoordinator
"""
# Standard
from datetime import timedelta
import threading

# Third Party
import pytest

# Local
from pkgop.bootstrap import LifecycleCoordinator, ReadinessPoller
from pkgop.exceptions import ManagerError, ReadinessError
from pkgop.manager import ManagerOptions
from pkgop.test_helpers.helpers import MockClusterClient, MockManager

PERIOD = timedelta(seconds=0.05)

## Helpers #####################################################################


class ScriptedPoller(ReadinessPoller):
    """Poller that sends a fixed signal once released"""

    def __init__(self, signal=None, error=None):
        super().__init__(MockClusterClient(), check_interval=PERIOD)
        self.signal = signal
        self.error = error
        self.release = threading.Event()
        self.events = []

    def run(self):
        self.events.append("run")
        while not self.should_stop():
            if self.release.wait(0.01):
                if self.signal == "complete":
                    self.coordinator.bootstrap_complete()
                elif self.signal == "failed":
                    self.coordinator.bootstrap_failed(self.error)
                return

    def stop_thread(self):
        self.events.append("stop")
        super().stop_thread()


def make_coordinator(**manager_kwargs):
    manager = MockManager(ManagerOptions(), **manager_kwargs)
    return manager, LifecycleCoordinator(
        manager, coordinator_period=PERIOD, shutdown_timeout=timedelta(seconds=1)
    )


## Tests #######################################################################


def test_complete_returns_zero_and_stops_everything():
    """Make sure completion stops the poller before the manager and returns 0"""
    poller = ScriptedPoller(signal="complete")
    order = []
    manager, coordinator = make_coordinator(
        on_start=lambda mgr: (order.append(poller.is_alive()), poller.release.set())
    )
    assert coordinator.run(poller) == 0
    assert order == [True]
    assert manager.events == ["start", "stop"]
    assert poller.events == ["run", "stop"]
    assert not manager.is_alive()
    poller.join(1)
    assert not poller.is_alive()


def test_failure_raised_after_shutdown():
    """Make sure a poller failure stops the manager and is raised"""
    poller = ScriptedPoller(signal="failed", error=ReadinessError("nope"))
    manager, coordinator = make_coordinator(on_start=lambda _: poller.release.set())
    with pytest.raises(ReadinessError, match="nope"):
        coordinator.run(poller)
    assert manager.events == ["start", "stop"]
    poller.join(1)
    assert not poller.is_alive()


def test_manager_dies_early():
    """Make sure a manager terminating before completion is a ManagerError"""
    poller = ScriptedPoller()
    manager, coordinator = make_coordinator(die_after_start=True)
    with pytest.raises(ManagerError):
        coordinator.run(poller)
    assert "stop" in poller.events
    poller.join(1)
    assert not poller.is_alive()
    assert manager.events[0] == "start"


def test_manager_fails_to_start():
    """Make sure a manager that cannot start is a ManagerError"""
    poller = ScriptedPoller()
    _, coordinator = make_coordinator(start_result=False)
    with pytest.raises(ManagerError):
        coordinator.run(poller)
    poller.join(1)
    assert not poller.is_alive()


def test_first_signal_wins():
    """Make sure only the first terminal signal counts"""
    _, coordinator = make_coordinator()
    coordinator.bootstrap_complete()
    coordinator.bootstrap_failed(ReadinessError("late"))
    assert coordinator.finished
    poller = ScriptedPoller()
    assert coordinator.run(poller) == 0


def test_coordinator_attached_to_poller():
    """Make sure the coordinator registers itself on a poller without one"""
    poller = ScriptedPoller(signal="complete")
    _, coordinator = make_coordinator(on_start=lambda _: poller.release.set())
    coordinator.run(poller)
    assert poller.coordinator is coordinator
