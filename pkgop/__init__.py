"""
Package exports
"""

# Local
from . import config, status
from .bootstrap import run_bootstrap
from .cluster import ClusterClientBase, DryRunClusterClient, OpenshiftClusterClient
from .exceptions import assert_config, assert_package
from .manager import ManagerBase, ManagerOptions
from .packages import FolderLoader, PackageDefinition, TemplateContext
