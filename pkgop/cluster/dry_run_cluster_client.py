"""
The DryRunClusterClient implements the ClusterClient interface but does not
actually interact with the cluster and instead holds the state of the cluster in
a local map.
"""

# Standard
from datetime import datetime, timezone
from itertools import count
from threading import RLock
from typing import Dict, Iterable, List, Optional, Set, Tuple
import copy
import uuid

# First Party
import alog

# Local
from .. import constants
from ..exceptions import (
    AlreadyExistsError,
    ClusterError,
    NoKindMatchError,
    NotFoundError,
)
from .base import ClusterClientBase

log = alog.use_channel("DRY-RUN")

# Kinds that any cluster serves without CRDs
BUILTIN_KINDS = [
    ("v1", "Namespace"),
    ("v1", "ServiceAccount"),
    ("v1", "ConfigMap"),
    ("v1", "Secret"),
    ("v1", "Service"),
    ("apps/v1", "Deployment"),
    ("rbac.authorization.k8s.io/v1", "ClusterRole"),
    ("rbac.authorization.k8s.io/v1", "ClusterRoleBinding"),
    ("rbac.authorization.k8s.io/v1", "Role"),
    ("rbac.authorization.k8s.io/v1", "RoleBinding"),
    (f"{constants.CRD_GROUP}/v1", constants.CRD_KIND),
]


def _split_api_version(api_version: Optional[str]) -> Tuple[str, Optional[str]]:
    """Split an apiVersion into (group, version). The core group is ""."""
    if not api_version:
        return "", None
    if "/" in api_version:
        group, version = api_version.split("/", 1)
        return group, version
    return "", api_version


class DryRunClusterClient(ClusterClientBase):
    """
    Cluster client which doesn't actually talk to a cluster!

    Objects are keyed by group/kind and namespace/name so that any served
    version of a kind reads the same object. When strict_kinds is set, only
    BUILTIN_KINDS and kinds defined by created CustomResourceDefinitions are
    served and all other kinds raise NoKindMatchError.
    """

    def __init__(
        self,
        resources: Optional[Iterable[dict]] = None,
        strict_kinds: bool = False,
        strict_resource_version: bool = True,
    ):
        """Construct with optional pre-existing resources

        Args:
            resources:  Optional[Iterable[dict]]
                Objects that already exist in the cluster. Their kinds are
                registered as served.
            strict_kinds:  bool
                If true, unregistered kinds raise NoKindMatchError
            strict_resource_version:  bool
                If true, updates carrying a stale resourceVersion are rejected
        """
        self.strict_kinds = strict_kinds
        self.strict_resource_version = strict_resource_version
        self._lock = RLock()
        self._cluster_content: Dict[Tuple[str, str], Dict[Tuple, dict]] = {}
        self._served_kinds: Set[Tuple[str, str, str]] = set()
        self._resource_versions = count(1)

        for api_version, kind in BUILTIN_KINDS:
            self.register_kind(api_version, kind)
        for resource in resources or []:
            self.register_kind(resource["apiVersion"], resource["kind"])
            self._store(copy.deepcopy(resource))
            self._register_crd_kinds(resource)

    ## Interface ###############################################################

    def create(self, resource_definition: dict) -> dict:
        res_id = self._get_resource_identifiers(resource_definition)
        log.info(
            "DRY RUN create [%s/%s/%s] in %s",
            res_id.api_version,
            res_id.kind,
            res_id.name,
            res_id.namespace,
        )
        self._check_kind(res_id.kind, res_id.api_version)
        with self._lock:
            existing = self._lookup(
                res_id.kind, res_id.name, res_id.namespace, res_id.api_version
            )
            if existing is not None:
                raise AlreadyExistsError(f"{res_id.kind}/{res_id.name} already exists")
            resource = copy.deepcopy(resource_definition)
            metadata = resource.setdefault("metadata", {})
            metadata.pop("resourceVersion", None)
            metadata["uid"] = str(uuid.uuid4())
            metadata["creationTimestamp"] = datetime.now(timezone.utc).strftime(
                "%Y-%m-%dT%H:%M:%SZ"
            )
            metadata["generation"] = 1
            stored = self._store(resource)
        self._register_crd_kinds(stored)
        return copy.deepcopy(stored)

    def get(
        self,
        kind: str,
        name: str,
        namespace: Optional[str] = None,
        api_version: Optional[str] = None,
    ) -> dict:
        log.info("DRY RUN get [%s/%s] in [%s]", kind, name, namespace)
        self._check_kind(kind, api_version)
        with self._lock:
            current = self._lookup(kind, name, namespace, api_version)
            if current is None:
                raise NotFoundError(f"{kind}/{name} not found")
            return copy.deepcopy(current)

    def update(self, resource_definition: dict) -> dict:
        res_id = self._get_resource_identifiers(resource_definition)
        log.info(
            "DRY RUN update [%s/%s/%s] in %s",
            res_id.api_version,
            res_id.kind,
            res_id.name,
            res_id.namespace,
        )
        self._check_kind(res_id.kind, res_id.api_version)
        with self._lock:
            current = self._lookup(
                res_id.kind, res_id.name, res_id.namespace, res_id.api_version
            )
            if current is None:
                raise NotFoundError(f"{res_id.kind}/{res_id.name} not found")
            resource = copy.deepcopy(resource_definition)
            self._check_resource_version(current, resource)

            # The status subresource and server managed metadata are kept
            metadata = resource.setdefault("metadata", {})
            for key in ["uid", "creationTimestamp"]:
                metadata[key] = current["metadata"].get(key)
            generation = current["metadata"].get("generation", 1)
            if resource.get("spec") != current.get("spec"):
                generation += 1
            metadata["generation"] = generation
            if "status" in current:
                resource["status"] = current["status"]
            else:
                resource.pop("status", None)
            stored = self._store(resource)
        return copy.deepcopy(stored)

    def set_status(  # pylint: disable=too-many-arguments
        self,
        kind: str,
        name: str,
        namespace: Optional[str],
        status: dict,
        api_version: Optional[str] = None,
    ) -> dict:
        log.info("DRY RUN set_status of [%s/%s] in %s", kind, name, namespace)
        log.debug3("Status: %s", status)
        self._check_kind(kind, api_version)
        with self._lock:
            current = self._lookup(kind, name, namespace, api_version)
            if current is None:
                raise NotFoundError(f"{kind}/{name} not found")
            resource = copy.deepcopy(current)
            resource["status"] = copy.deepcopy(status)
            return copy.deepcopy(self._store(resource))

    ## Dry Run Methods #########################################################

    def register_kind(self, api_version: str, kind: str):
        """Mark the given kind as served by the cluster"""
        group, version = _split_api_version(api_version)
        log.debug2("Registering served kind [%s/%s]", api_version, kind)
        self._served_kinds.add((group, version, kind))

    def list_objects(self, kind: Optional[str] = None) -> List[dict]:
        """List copies of all stored objects, optionally filtered by kind"""
        with self._lock:
            return [
                copy.deepcopy(obj)
                for (_, obj_kind), entries in self._cluster_content.items()
                if kind is None or obj_kind == kind
                for obj in entries.values()
            ]

    ## Implementation Details ##################################################

    def _check_kind(self, kind: str, api_version: Optional[str]):
        if not self.strict_kinds:
            return
        group, version = _split_api_version(api_version)
        served = any(
            served_kind == kind
            and (
                api_version is None
                or (served_group, served_version) == (group, version)
            )
            for served_group, served_version, served_kind in self._served_kinds
        )
        if not served:
            raise NoKindMatchError(
                f"No matches for kind {kind} in version {api_version}"
            )

    def _lookup(
        self,
        kind: str,
        name: str,
        namespace: Optional[str],
        api_version: Optional[str],
    ) -> Optional[dict]:
        if api_version is None:
            matches = [
                entries[(namespace, name)]
                for (_, obj_kind), entries in self._cluster_content.items()
                if obj_kind == kind and (namespace, name) in entries
            ]
            return matches[0] if len(matches) == 1 else None
        group, _ = _split_api_version(api_version)
        return self._cluster_content.get((group, kind), {}).get((namespace, name))

    def _store(self, resource: dict) -> dict:
        res_id = self._get_resource_identifiers(resource)
        group, _ = _split_api_version(res_id.api_version)
        resource["metadata"]["resourceVersion"] = str(next(self._resource_versions))
        with self._lock:
            self._cluster_content.setdefault((group, res_id.kind), {})[
                (res_id.namespace, res_id.name)
            ] = resource
        return resource

    def _check_resource_version(self, current: dict, resource: dict):
        desired_version = resource.get("metadata", {}).get("resourceVersion")
        current_version = current.get("metadata", {}).get("resourceVersion")
        if (
            self.strict_resource_version
            and desired_version
            and desired_version != current_version
        ):
            log.warning("Unable to update resource. resourceVersion is out of date")
            raise ClusterError(
                "the object has been modified; please apply your changes to the "
                "latest version and try again",
                status=409,
            )

    def _register_crd_kinds(self, resource: dict):
        """A created CRD makes its kind served at every served version"""
        group, _ = _split_api_version(resource.get("apiVersion"))
        if (group, resource.get("kind")) != (constants.CRD_GROUP, constants.CRD_KIND):
            return
        spec = resource.get("spec", {})
        crd_kind = spec.get("names", {}).get("kind")
        crd_group = spec.get("group")
        for version in spec.get("versions", []):
            if version.get("served", True) and crd_kind and crd_group:
                self.register_kind(f"{crd_group}/{version['name']}", crd_kind)
