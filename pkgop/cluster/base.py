"""
This defines the base class for all ClusterClient types.
"""

# Standard
from collections import namedtuple
from typing import Optional
import abc


class ClusterClientBase(abc.ABC):
    """
    Base class for cluster clients which carry out the create/get/update
    operations that bootstrap performs against the cluster API.

    Implementations report the outcome of an operation through exceptions so
    that callers can distinguish the expected cases:

    * AlreadyExistsError: create found an existing object
    * NotFoundError: the named object does not exist
    * NoKindMatchError: the cluster does not serve the requested kind
    * ClusterError: anything else
    """

    @abc.abstractmethod
    def create(self, resource_definition: dict) -> dict:
        """Create the given object in the cluster

        Args:
            resource_definition:  dict
                The full manifest of the object to create

        Returns:
            created:  dict
                The object as stored by the cluster

        Raises:
            AlreadyExistsError: An object with this identity already exists
            NoKindMatchError: The kind of the object is not served
            ClusterError: The create failed for any other reason
        """

    @abc.abstractmethod
    def get(
        self,
        kind: str,
        name: str,
        namespace: Optional[str] = None,
        api_version: Optional[str] = None,
    ) -> dict:
        """Fetch the current state of a single object by name

        Args:
            kind:  str
                The kind of the object to fetch
            name:  str
                The name of the object to fetch
            namespace:  Optional[str]
                The namespace of the object or None for cluster scoped objects
            api_version:  Optional[str]
                The api_version of the resource kind to fetch

        Returns:
            current_state:  dict
                The dict representation of the object

        Raises:
            NotFoundError: No object with this name exists
            NoKindMatchError: The kind is not served
            ClusterError: The read failed for any other reason
        """

    @abc.abstractmethod
    def update(self, resource_definition: dict) -> dict:
        """Replace an existing object with the given manifest. The manifest
        should carry the resourceVersion it was read at.

        Args:
            resource_definition:  dict
                The full manifest of the object to update

        Returns:
            updated:  dict
                The object as stored by the cluster

        Raises:
            NotFoundError: The object does not exist
            NoKindMatchError: The kind is not served
            ClusterError: The update failed for any other reason, including
                a stale resourceVersion
        """

    @abc.abstractmethod
    def set_status(  # pylint: disable=too-many-arguments
        self,
        kind: str,
        name: str,
        namespace: Optional[str],
        status: dict,
        api_version: Optional[str] = None,
    ) -> dict:
        """Overwrite the status subresource of an object

        Args:
            kind:  str
                The kind of the object to update
            name:  str
                The name of the object to update
            namespace:  Optional[str]
                The namespace of the object or None for cluster scoped objects
            status:  dict
                The status to set on the object
            api_version:  Optional[str]
                The api_version of the resource kind

        Returns:
            updated:  dict
                The object as stored by the cluster
        """

    ## Shared Helpers ##########################################################

    # Internal struct to hold the key resource identifier elements
    _ResourceIdentifiers = namedtuple(
        "ResourceIdentifiers", ["api_version", "kind", "name", "namespace"]
    )

    @classmethod
    def _get_resource_identifiers(cls, resource_definition, require_api_version=True):
        """Helper for getting the required parts of a single resource definition"""
        api_version = resource_definition.get("apiVersion")
        kind = resource_definition.get("kind")
        name = (resource_definition.get("metadata") or {}).get("name")
        namespace = (resource_definition.get("metadata") or {}).get("namespace")
        assert None not in [
            kind,
            name,
        ], "Cannot apply resource without kind or name"
        assert (
            not require_api_version or api_version is not None
        ), "Cannot apply resource without apiVersion"
        return cls._ResourceIdentifiers(api_version, kind, name, namespace)
