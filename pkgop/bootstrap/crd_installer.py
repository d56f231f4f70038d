"""
Pre-installation of the CustomResourceDefinitions shipped in a package. CRDs
must exist before the manager starts because its caches watch them.
"""

# Standard
from typing import List

# First Party
import alog

# Local
from .. import constants
from ..cluster import ClusterClientBase
from ..exceptions import AlreadyExistsError
from ..packages import CRD_GROUP_KIND, PackageDefinition, PackageObject

log = alog.use_channel("CRDS")


@alog.logged_function(log.debug2)
def install_crds(
    cluster_client: ClusterClientBase,
    package: PackageDefinition,
) -> List[PackageObject]:
    """Create every CRD in the package, labeled for inclusion in the manager's
    dynamic cache. CRDs that already exist are left untouched. Any other error
    is propagated and aborts the bootstrap.

    Args:
        cluster_client:  ClusterClientBase
            The client used to create the CRDs
        package:  PackageDefinition
            The loaded self package

    Returns:
        crds:  List[PackageObject]
            The CRD objects that were handled, in package order
    """
    crds = [obj for obj in package.iter_objects() if obj.group_kind == CRD_GROUP_KIND]
    log.debug("Found %d CRDs in package %s", len(crds), package.name)
    for crd in crds:
        crd.set_label(
            constants.DYNAMIC_CACHE_LABEL, constants.DYNAMIC_CACHE_LABEL_VALUE
        )
        try:
            cluster_client.create(crd.definition)
            log.info("Created CRD %s", crd.name, extra={"resource": crd.definition})
        except AlreadyExistsError:
            log.info(
                "CRD %s already exists",
                crd.name,
                extra={"resource": crd.definition},
            )
    return crds
