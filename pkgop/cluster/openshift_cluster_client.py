"""
This ClusterClient is responsible for delegating cluster operations to the
openshift library. It is the one that will be used when the bootstrap runs in
the cluster or outside the cluster making live changes.
"""
# Standard
from typing import Optional

# Third Party
from openshift.dynamic import DynamicClient
from openshift.dynamic.exceptions import (
    ConflictError,
    DynamicApiError,
    NotFoundError as DynamicNotFoundError,
    ResourceNotFoundError,
    ResourceNotUniqueError,
)
from openshift.dynamic.resource import Resource
import kubernetes
import urllib3

# First Party
import alog

# Local
from ..exceptions import (
    AlreadyExistsError,
    ClusterError,
    NoKindMatchError,
    NotFoundError,
)
from .base import ClusterClientBase

log = alog.use_channel("OSFTC")

# Field manager reported on all writes
FIELD_MANAGER = "package-operator-bootstrap"


class OpenshiftClusterClient(ClusterClientBase):
    """This ClusterClient uses the openshift DynamicClient to interact with the
    cluster
    """

    def __init__(self):
        # Set up the client lazily so that construction never talks to the
        # cluster
        log.debug("Constructing live cluster client")
        self._client = None

    @property
    def client(self):
        """The DynamicClient, built on first use"""
        if self._client is None:
            self._client = self._setup_client()
        return self._client

    @alog.logged_function(log.debug2)
    def create(self, resource_definition: dict) -> dict:
        res_id = self._get_resource_identifiers(resource_definition)
        resource_handle = self._get_resource_handle(res_id.kind, res_id.api_version)
        log.debug2(
            "Attempting to create [%s/%s/%s] in %s",
            res_id.api_version,
            res_id.kind,
            res_id.name,
            res_id.namespace,
        )
        try:
            return resource_handle.create(
                body=resource_definition,
                namespace=res_id.namespace,
                field_manager=FIELD_MANAGER,
            ).to_dict()
        except ConflictError as err:
            raise AlreadyExistsError(
                f"{res_id.kind}/{res_id.name} already exists"
            ) from err
        except (DynamicApiError, urllib3.exceptions.HTTPError) as err:
            raise self._cluster_error("create", res_id, err) from err

    @alog.logged_function(log.debug2)
    def get(
        self,
        kind: str,
        name: str,
        namespace: Optional[str] = None,
        api_version: Optional[str] = None,
    ) -> dict:
        resource_handle = self._get_resource_handle(kind, api_version)
        res_id = self._ResourceIdentifiers(api_version, kind, name, namespace)
        try:
            return resource_handle.get(name=name, namespace=namespace).to_dict()
        except DynamicNotFoundError as err:
            log.debug(
                "Object %s/%s not present in namespace %s", kind, name, namespace
            )
            raise NotFoundError(f"{kind}/{name} not found") from err
        except (DynamicApiError, urllib3.exceptions.HTTPError) as err:
            raise self._cluster_error("get", res_id, err) from err

    @alog.logged_function(log.debug2)
    def update(self, resource_definition: dict) -> dict:
        res_id = self._get_resource_identifiers(resource_definition)
        resource_handle = self._get_resource_handle(res_id.kind, res_id.api_version)
        log.debug2(
            "Replacing %s/%s/%s in namespace %s",
            res_id.api_version,
            res_id.kind,
            res_id.name,
            res_id.namespace,
        )
        try:
            return resource_handle.replace(
                body=resource_definition,
                name=res_id.name,
                namespace=res_id.namespace,
                field_manager=FIELD_MANAGER,
            ).to_dict()
        except DynamicNotFoundError as err:
            raise NotFoundError(f"{res_id.kind}/{res_id.name} not found") from err
        except (DynamicApiError, urllib3.exceptions.HTTPError) as err:
            raise self._cluster_error("update", res_id, err) from err

    @alog.logged_function(log.debug2)
    def set_status(  # pylint: disable=too-many-arguments
        self,
        kind: str,
        name: str,
        namespace: Optional[str],
        status: dict,
        api_version: Optional[str] = None,
    ) -> dict:
        resource = self.get(
            kind=kind, name=name, namespace=namespace, api_version=api_version
        )
        resource["status"] = status
        resource_handle = self._get_resource_handle(kind, api_version)
        res_id = self._ResourceIdentifiers(api_version, kind, name, namespace)
        try:
            return resource_handle.status.replace(body=resource).to_dict()
        except (DynamicApiError, urllib3.exceptions.HTTPError) as err:
            raise self._cluster_error("set_status", res_id, err) from err

    ## Implementation Helpers ##################################################

    @staticmethod
    def _setup_client():
        """Create a DynamicClient that will work based on where the bootstrap is
        running
        """
        in_cluster_config = kubernetes.client.Configuration()
        try:
            kubernetes.config.load_incluster_config(
                client_configuration=in_cluster_config
            )
        except kubernetes.config.ConfigException:
            log.debug2("No service account found. Using kubeconfig")
            return DynamicClient(kubernetes.config.new_client_from_config())
        log.debug2("Using in-cluster service account config")
        return DynamicClient(kubernetes.client.ApiClient(in_cluster_config))

    def _get_resource_handle(self, kind: str, api_version: Optional[str]) -> Resource:
        """Get the openshift resource handle for a specified kind and
        api_version. Kinds that were registered after the discovery cache was
        built (e.g. by a CRD created during this run) are found by refreshing
        the cache once.
        """
        for refresh in [False, True]:
            if refresh:
                log.debug2("Refreshing discovery cache for [%s/%s]", api_version, kind)
                self.client.resources.invalidate_cache()
            try:
                return self.client.resources.get(kind=kind, api_version=api_version)
            except ResourceNotFoundError:
                log.debug2("Kind [%s/%s] not found in discovery", api_version, kind)
            except ResourceNotUniqueError as err:
                raise ClusterError(
                    f"Multiple resources match kind {kind} in {api_version}"
                ) from err
            except (DynamicApiError, urllib3.exceptions.HTTPError) as err:
                raise ClusterError(
                    f"Failed to discover {api_version}/{kind}: {err}"
                ) from err
        raise NoKindMatchError(f"No matches for kind {kind} in version {api_version}")

    @staticmethod
    def _cluster_error(operation: str, res_id, err: Exception) -> ClusterError:
        """Wrap an unexpected client error as a ClusterError"""
        status = getattr(err, "status", None)
        log.warning(
            "Failed to %s [%s/%s/%s] in %s (status %s): %s",
            operation,
            res_id.api_version,
            res_id.kind,
            res_id.name,
            res_id.namespace,
            status,
            err,
        )
        return ClusterError(
            f"Failed to {operation} {res_id.kind}/{res_id.name}: {err}", status=status
        )
