"""
The ClusterClient is the abstraction in charge of interacting with the
kubernetes cluster API to create, look up, and update resources.
"""

# Local
from .base import ClusterClientBase
from .dry_run_cluster_client import DryRunClusterClient
from .openshift_cluster_client import OpenshiftClusterClient
