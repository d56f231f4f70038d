"""
Decide whether the cluster still needs to be bootstrapped by looking at the
self package resource
"""

# Standard
from enum import Enum
import copy

# First Party
import alog

# Local
from .. import config, constants, status
from ..cluster import ClusterClientBase
from ..exceptions import BootstrapInProgressError, NoKindMatchError, NotFoundError

log = alog.use_channel("SELFREG")


class RegistrationState(Enum):
    """The possible outcomes of resolving the self package"""

    UNKNOWN = "Unknown"
    ALREADY_INSTALLED = "AlreadyInstalled"
    NEEDS_BOOTSTRAP = "NeedsBootstrap"
    FATAL = "Fatal"


class SelfRegistration:
    """The SelfRegistration reads the self package exactly once and decides
    which path the bootstrap takes:

    * Found and Unpacked: the operator is already installed. The desired image
        is moved to the running image with a single update.
    * Not found, or the ClusterPackage kind is not served yet: a full bootstrap
        is needed.
    * Found but not Unpacked: another process is bootstrapping right now. This
        is fatal so that the self package is never created twice.
    * Any other error is fatal.

    There is no retry here. A restart of the process is the retry.
    """

    def __init__(self, cluster_client: ClusterClientBase, package_name: str = None):
        self.cluster_client = cluster_client
        self.package_name = package_name or config.self_package.name
        self.state = RegistrationState.UNKNOWN

    def resolve(self, self_image: str) -> RegistrationState:
        """Read the self package and move to the resulting state

        Args:
            self_image:  str
                The image of the running operator

        Returns:
            state:  RegistrationState
                ALREADY_INSTALLED or NEEDS_BOOTSTRAP. FATAL is never returned,
                the error that caused it is raised instead.
        """
        try:
            self_package = self.cluster_client.get(
                kind=constants.CLUSTER_PACKAGE_KIND,
                api_version=constants.CLUSTER_PACKAGE_API_VERSION,
                name=self.package_name,
            )
        except (NotFoundError, NoKindMatchError) as err:
            log.info("Self package %s not found: %s", self.package_name, err)
            self.state = RegistrationState.NEEDS_BOOTSTRAP
            return self.state
        except Exception:
            self.state = RegistrationState.FATAL
            raise

        if not status.is_resource_condition_true(
            constants.PACKAGE_UNPACKED_CONDITION, self_package
        ):
            self.state = RegistrationState.FATAL
            raise BootstrapInProgressError(
                f"Self package {self.package_name} exists but is not unpacked yet"
            )

        log.info(
            "Self package %s already installed, updating image to %s",
            self.package_name,
            self_image,
            extra={"resource": self_package},
        )
        updated = copy.deepcopy(self_package)
        updated.setdefault("spec", {})["image"] = self_image
        try:
            self.cluster_client.update(updated)
        except Exception:
            self.state = RegistrationState.FATAL
            raise
        self.state = RegistrationState.ALREADY_INSTALLED
        return self.state
