"""
The LifecycleCoordinator runs the manager alongside the readiness poller and
owns the orderly shutdown of both once bootstrap has finished
"""

# Standard
from datetime import timedelta
from typing import Optional
import threading

# First Party
import alog

# Local
from .. import config
from ..exceptions import ManagerError, PkgOpError
from ..manager import ManagerBase
from ..utils import parse_time_delta
from .readiness import ReadinessPoller

log = alog.use_channel("LIFECYCLE")


class LifecycleCoordinator:
    """The coordinator waits for the first terminal signal from the poller.
    Completion stops the poller and the manager and yields exit code 0. A
    failure stops both and is raised on the calling thread. A manager that
    terminates on its own before either signal is a ManagerError.
    """

    def __init__(
        self,
        manager: ManagerBase,
        coordinator_period: Optional[timedelta] = None,
        shutdown_timeout: Optional[timedelta] = None,
    ):
        self.manager = manager
        self.coordinator_period = coordinator_period or parse_time_delta(
            config.bootstrap.coordinator_period
        )
        self.shutdown_timeout = shutdown_timeout or parse_time_delta(
            config.bootstrap.shutdown_timeout
        )
        self._lock = threading.Lock()
        self._terminal = threading.Event()
        self._error: Optional[PkgOpError] = None

    ## Signals #################################################################

    def bootstrap_complete(self):
        """Signal that the self package is Available"""
        with self._lock:
            if self._terminal.is_set():
                log.debug2("Ignoring completion after terminal signal")
                return
            log.info("Bootstrap complete")
            self._terminal.set()

    def bootstrap_failed(self, error: PkgOpError):
        """Signal that the bootstrap cannot complete"""
        with self._lock:
            if self._terminal.is_set():
                log.debug2("Ignoring failure after terminal signal: %s", error)
                return
            log.error("Bootstrap failed: %s", error)
            self._error = error
            self._terminal.set()

    @property
    def finished(self) -> bool:
        return self._terminal.is_set()

    ## Run #####################################################################

    def run(self, poller: ReadinessPoller) -> int:
        """Start the poller, then the manager, and block until bootstrap has
        finished

        Args:
            poller:  ReadinessPoller
                The (not yet started) poller watching the self package

        Returns:
            exit_code:  int
                0 once bootstrap is complete and both threads are stopped
        """
        if poller.coordinator is None:
            poller.coordinator = self
        poller.start_thread()
        try:
            log.info("Starting manager %s", self.manager)
            if not self.manager.start():
                raise ManagerError(f"Failed to start manager {self.manager}")

            period = self.coordinator_period.total_seconds()
            while not self._terminal.wait(period):
                if not self.manager.is_alive():
                    raise ManagerError(
                        f"Manager {self.manager} terminated before bootstrap completed"
                    )
        finally:
            self.shutdown(poller)

        if self._error is not None:
            raise self._error
        return 0

    def shutdown(self, poller: ReadinessPoller):
        """Stop the poller and then the manager"""
        poller.stop_thread()
        if poller.is_alive():
            poller.join(self.coordinator_period.total_seconds())
        self.manager.stop()
        if not self.manager.wait(self.shutdown_timeout.total_seconds()):
            log.warning(
                "Manager %s did not stop within %s", self.manager, self.shutdown_timeout
            )
