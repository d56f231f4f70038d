"""
Dry run implementation of the Manager abstraction
"""

# Standard
from datetime import timedelta
from typing import Optional
import threading

# First Party
import alog

# Local
from .. import config, constants, status
from ..cluster import ClusterClientBase
from ..exceptions import NoKindMatchError, NotFoundError
from ..utils import parse_time_delta
from .base import ManagerBase, ManagerOptions

log = alog.use_channel("DRMGR")


class DryRunManager(ManagerBase):
    """
    The DryRunManager stands in for the steady-state manager when running
    against a dry run cluster. It periodically "reconciles" the self package
    by reporting it Unpacked and, after a configured number of reconciles,
    Available.
    """

    def __init__(
        self,
        options: ManagerOptions,
        cluster_client: ClusterClientBase,
        reconcile_period: Optional[timedelta] = None,
        available_after: Optional[int] = None,
    ):
        """
        Args:
            options:  ManagerOptions
                The options fixed by the bootstrap
            cluster_client:  ClusterClientBase
                The (dry run) cluster holding the self package
            reconcile_period:  Optional[timedelta]
                Period between reconciles. Defaults to the library config.
            available_after:  Optional[int]
                Number of reconciles before the package is reported Available.
                Defaults to the library config.
        """
        super().__init__(options, cluster_client)
        self.reconcile_period = reconcile_period or parse_time_delta(
            config.dry_run_manager.reconcile_period
        )
        self.available_after = (
            available_after
            if available_after is not None
            else config.dry_run_manager.available_after
        )
        self.reconcile_count = 0
        self.shutdown = threading.Event()
        self._thread = threading.Thread(
            name="dry_run_manager", target=self._run, daemon=True
        )

    ## Interface ###############################################################

    def start(self) -> bool:
        if self._thread.is_alive() or self.shutdown.is_set():
            log.warning("Cannot start %s more than once", self)
            return False
        log.info("Starting %s", self)
        self._thread.start()
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        if not self._thread.is_alive():
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def stop(self):
        log.info("Stopping %s", self)
        self.shutdown.set()

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    ## Implementation Details ##################################################

    def _run(self):
        while not self.shutdown.is_set():
            self.reconcile()
            self.shutdown.wait(self.reconcile_period.total_seconds())
        log.debug("%s terminated", self)

    def reconcile(self):
        """Run a single reconcile of the self package"""
        try:
            package = self.cluster_client.get(
                kind=constants.CLUSTER_PACKAGE_KIND,
                api_version=constants.CLUSTER_PACKAGE_API_VERSION,
                name=config.self_package.name,
            )
        except (NotFoundError, NoKindMatchError):
            log.debug2("Self package not present yet")
            return

        self.reconcile_count += 1
        generation = package.get("metadata", {}).get("generation")
        available = self.reconcile_count >= self.available_after
        log.debug(
            "Reconcile %d of self package. Available: %s",
            self.reconcile_count,
            available,
        )
        conditions = status.get_conditions(package)
        conditions = status.set_condition(
            conditions,
            status.make_condition(
                constants.PACKAGE_UNPACKED_CONDITION,
                True,
                "UnpackSuccess",
                f"Unpacked {package.get('spec', {}).get('image')}",
                observed_generation=generation,
            ),
        )
        conditions = status.set_condition(
            conditions,
            status.make_condition(
                constants.PACKAGE_AVAILABLE_CONDITION,
                available,
                "Available" if available else "ProbeFailure",
                observed_generation=generation,
            ),
        )
        new_status = dict(package.get("status") or {})
        new_status["conditions"] = conditions
        self.cluster_client.set_status(
            kind=constants.CLUSTER_PACKAGE_KIND,
            api_version=constants.CLUSTER_PACKAGE_API_VERSION,
            name=config.self_package.name,
            namespace=None,
            status=new_status,
        )
