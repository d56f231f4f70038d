"""
The Bootstrapper drives a first-ever installation: it switches the manager
into forced adoption and creates the self package
"""

# Standard
import os

# First Party
import alog

# Local
from .. import config, constants
from ..cluster import ClusterClientBase
from ..exceptions import AlreadyExistsError
from ..manager import ManagerOptions

log = alog.use_channel("BOOT")

# Value exported to the environment when the forced adoption switch is set
FORCE_ADOPTION_ENV_VALUE = "1"


class Bootstrapper:
    """The Bootstrapper prepares the manager options and creates the self
    package. Starting the readiness poller and the manager is left to the
    LifecycleCoordinator.
    """

    def __init__(
        self,
        cluster_client: ClusterClientBase,
        options: ManagerOptions,
        package_name: str = None,
        force_adoption_env_var: str = None,
    ):
        """
        Args:
            cluster_client:  ClusterClientBase
                The client used to create the self package
            options:  ManagerOptions
                The options that will be handed to the manager. Forced adoption
                is switched on in place.
            package_name:  str
                Name of the self package. Defaults to the library config.
            force_adoption_env_var:  str
                If set, the forced adoption switch is also exported to the
                environment under this name. Defaults to the library config.
        """
        self.cluster_client = cluster_client
        self.options = options
        self.package_name = package_name or config.self_package.name
        self.force_adoption_env_var = (
            force_adoption_env_var
            if force_adoption_env_var is not None
            else config.force_adoption_env_var
        )

    def bootstrap(self, self_image: str) -> dict:
        """Switch on forced adoption then create the self package

        Args:
            self_image:  str
                The image of the running operator

        Returns:
            self_package:  dict
                The definition of the self package that was requested
        """
        log.info("Bootstrap needed for %s", self.package_name)
        self.enable_force_adoption()

        self_package = self.self_package_definition(self_image)
        try:
            self.cluster_client.create(self_package)
            log.info(
                "Created self package %s",
                self.package_name,
                extra={"resource": self_package},
            )
        except AlreadyExistsError:
            log.info(
                "Self package %s already exists",
                self.package_name,
                extra={"resource": self_package},
            )
        return self_package

    def enable_force_adoption(self):
        """Set the forced adoption switch. It is never unset for the rest of
        the process.
        """
        self.options.force_adoption = True
        if self.force_adoption_env_var:
            log.debug(
                "Exporting %s=%s",
                self.force_adoption_env_var,
                FORCE_ADOPTION_ENV_VALUE,
            )
            os.environ[self.force_adoption_env_var] = FORCE_ADOPTION_ENV_VALUE

    def self_package_definition(self, self_image: str) -> dict:
        return {
            "apiVersion": constants.CLUSTER_PACKAGE_API_VERSION,
            "kind": constants.CLUSTER_PACKAGE_KIND,
            "metadata": {"name": self.package_name},
            "spec": {"image": self_image},
        }
