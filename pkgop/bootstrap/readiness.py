"""
Thread that watches the self package until it reports Available
"""

# Standard
from datetime import timedelta
from typing import Optional
import threading
import time

# First Party
import alog

# Local
from .. import config, constants, status
from ..cluster import ClusterClientBase
from ..exceptions import ReadinessError, ReadinessTimeoutError
from ..utils import parse_time_delta

log = alog.use_channel("READY")


class ReadinessPoller(threading.Thread):
    """The ReadinessPoller reads the self package immediately and then once
    every check_interval. It reports the outcome to its coordinator exactly
    once:

    * bootstrap_complete() when the Available condition is true
    * bootstrap_failed(ReadinessError) when a read fails
    * bootstrap_failed(ReadinessTimeoutError) when the optional deadline expires

    The poller also exits without reporting once stop_thread() is called.
    """

    def __init__(
        self,
        cluster_client: ClusterClientBase,
        coordinator=None,
        check_interval: Optional[timedelta] = None,
        readiness_timeout: Optional[timedelta] = None,
        package_name: Optional[str] = None,
    ):
        """
        Args:
            cluster_client:  ClusterClientBase
                The client used to read the self package
            coordinator:  LifecycleCoordinator
                The receiver of the completion or failure signal. If not given
                here, the coordinator attaches itself when run.
            check_interval:  Optional[timedelta]
                The period between reads. Defaults to the library config.
            readiness_timeout:  Optional[timedelta]
                The optional deadline. Defaults to the library config, where an
                empty value means no deadline.
            package_name:  Optional[str]
                Name of the self package. Defaults to the library config.
        """
        self.cluster_client = cluster_client
        self.coordinator = coordinator
        self.check_interval = check_interval or parse_time_delta(
            config.bootstrap.check_interval
        )
        self.readiness_timeout = readiness_timeout or parse_time_delta(
            config.bootstrap.readiness_timeout
        )
        self.package_name = package_name or config.self_package.name
        self.read_count = 0
        self.shutdown = threading.Event()
        super().__init__(name="readiness_poller", daemon=True)

    ## Thread Interface ########################################################

    def start_thread(self):
        """If the thread is not already alive start it

        Raises:
            ReadinessError: If no coordinator is attached to receive the outcome
        """
        if self.coordinator is None:
            raise ReadinessError(f"No coordinator attached to {self.name}")
        if not self.is_alive():
            log.info("Starting %s: %s", self.__class__.__name__, self.name)
            self.start()

    def stop_thread(self):
        """Set the shutdown event"""
        log.info("Stopping %s: %s", self.__class__.__name__, self.name)
        self.shutdown.set()

    def should_stop(self) -> bool:
        """Helper to determine if a thread should shutdown"""
        return self.shutdown.is_set()

    def run(self):
        deadline = None
        if self.readiness_timeout:
            deadline = time.monotonic() + self.readiness_timeout.total_seconds()

        while not self.should_stop():
            try:
                available = self.check()
            except Exception as err:  # pylint: disable=broad-except
                log.error("Failed to read self package %s: %s", self.package_name, err)
                self.coordinator.bootstrap_failed(
                    ReadinessError(
                        f"Failed to read self package {self.package_name}: {err}"
                    )
                )
                return

            if available:
                log.info("Bootstrap of %s succeeded", self.package_name)
                self.coordinator.bootstrap_complete()
                return

            wait_time = self.check_interval.total_seconds()
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    self.coordinator.bootstrap_failed(
                        ReadinessTimeoutError(
                            f"Self package {self.package_name} not Available "
                            f"after {self.readiness_timeout}"
                        )
                    )
                    return
                wait_time = min(wait_time, remaining)
            self.shutdown.wait(wait_time)

        log.debug("%s stopped before bootstrap completed", self.name)

    ## Implementation Details ##################################################

    def check(self) -> bool:
        """Read the self package once and report whether it is Available"""
        self.read_count += 1
        log.debug2("Readiness check %d of %s", self.read_count, self.package_name)
        self_package = self.cluster_client.get(
            kind=constants.CLUSTER_PACKAGE_KIND,
            api_version=constants.CLUSTER_PACKAGE_API_VERSION,
            name=self.package_name,
        )
        return status.is_resource_condition_true(
            constants.PACKAGE_AVAILABLE_CONDITION, self_package
        )
