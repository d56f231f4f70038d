"""
The bootstrap brings the package operator into a cluster that does not run it
yet, or hands a newly deployed image to an operator that is already installed
"""

# Local
from .crd_installer import install_crds
from .lifecycle import LifecycleCoordinator
from .orchestrator import Bootstrapper
from .readiness import ReadinessPoller
from .runner import run_bootstrap
from .self_registration import RegistrationState, SelfRegistration
