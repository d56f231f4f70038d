"""
This module holds the base class interface for the long-running manager that
takes over steady-state reconciliation once bootstrap has handed off
"""

# Standard
from dataclasses import dataclass
from typing import Optional
import abc

# Local
from ..cluster import ClusterClientBase


@dataclass
class ManagerOptions:
    """Options passed from the bootstrap to the manager it starts

    Attributes:
        self_bootstrap_image:  str
            The image of the running operator
        force_adoption:  bool
            When true, the manager must take ownership of pre-existing cluster
            objects (namespace, service account, bindings, CRDs) instead of
            failing on conflicts. Set only during the first-ever bootstrap.
    """

    self_bootstrap_image: str = ""
    force_adoption: bool = False


class ManagerBase(abc.ABC):
    """A Manager runs the steady-state reconciliation of packages. Its internals
    are not part of this library; bootstrap only needs to start it, check that
    it is still running and stop it.
    """

    def __init__(self, options: ManagerOptions, cluster_client: ClusterClientBase):
        """Construct with the options from the bootstrap

        Args:
            options:  ManagerOptions
                The options fixed by the bootstrap before the manager starts
            cluster_client:  ClusterClientBase
                The client the bootstrap used to talk to the cluster
        """
        self.options = options
        self.cluster_client = cluster_client

    @abc.abstractmethod
    def start(self) -> bool:
        """Start the manager without blocking

        Returns:
            success:  bool
                True if the manager was started successfully
        """

    @abc.abstractmethod
    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the manager has terminated or the timeout expires

        Returns:
            stopped:  bool
                True if the manager has terminated
        """

    @abc.abstractmethod
    def stop(self):
        """Request termination of the manager if it is currently running"""

    @abc.abstractmethod
    def is_alive(self) -> bool:
        """Whether the manager is still running"""

    def __str__(self):
        name = self.__class__.__name__
        return f"{name}[force_adoption={self.options.force_adoption}]"
