"""
Entrypoint logic for the bootstrap of the package operator into a cluster
"""

# Standard
from typing import Optional

# First Party
import alog

# Local
from .. import config
from ..cluster import ClusterClientBase
from ..exceptions import assert_config
from ..manager import ManagerFactory, ManagerOptions
from ..packages import FolderLoader, TemplateContext
from .crd_installer import install_crds
from .lifecycle import LifecycleCoordinator
from .orchestrator import Bootstrapper
from .readiness import ReadinessPoller
from .self_registration import RegistrationState, SelfRegistration

log = alog.use_channel("BOOT")


def run_bootstrap(
    cluster_client: ClusterClientBase,
    manager_factory: ManagerFactory,
    package_dir: Optional[str] = None,
    self_image: Optional[str] = None,
    loader: Optional[FolderLoader] = None,
) -> int:
    """Run the full bootstrap sequence:

    1. Load the self package
    2. Create the CRDs it contains
    3. Resolve whether the operator is already installed
    4. If not, create the self package and run the manager until the self
        package becomes Available

    Args:
        cluster_client:  ClusterClientBase
            The client for the cluster being bootstrapped
        manager_factory:  ManagerFactory
            Builds the manager from the options fixed during bootstrap
        package_dir:  Optional[str]
            The folder holding the self package. Defaults to the library config.
        self_image:  Optional[str]
            The image of the running operator. Defaults to the library config.
        loader:  Optional[FolderLoader]
            The package loader to use

    Returns:
        exit_code:  int
            0 on success. All failures are raised.
    """
    package_dir = package_dir or config.package_dir
    self_image = self_image or config.self_bootstrap_image
    assert_config(self_image, "No image configured (self_bootstrap_image)")
    loader = loader or FolderLoader()

    log.info("Bootstrapping from %s with image %s", package_dir, self_image)
    package = loader.load(package_dir, TemplateContext())
    install_crds(cluster_client, package)

    registration = SelfRegistration(cluster_client)
    state = registration.resolve(self_image)
    if state == RegistrationState.ALREADY_INSTALLED:
        log.info("Package operator already installed")
        return 0

    options = ManagerOptions(self_bootstrap_image=self_image)
    Bootstrapper(cluster_client, options).bootstrap(self_image)

    # The manager is built only once forced adoption has been decided
    manager = manager_factory(options)
    poller = ReadinessPoller(cluster_client)
    return LifecycleCoordinator(manager).run(poller)
