"""
Tests for the OpenshiftClusterClient using a mocked dynamic client
"""
# Standard
from unittest import mock

# Third Party
from kubernetes.client.rest import ApiException
from openshift.dynamic.exceptions import (
    ConflictError,
    InternalServerError,
    NotFoundError as DynamicNotFoundError,
    ResourceNotFoundError,
)
import kubernetes
import pytest

# First Party
import alog

# Local
from pkgop.cluster import OpenshiftClusterClient
from pkgop.cluster import openshift_cluster_client
from pkgop.exceptions import (
    AlreadyExistsError,
    ClusterError,
    NoKindMatchError,
    NotFoundError,
)
from pkgop.test_helpers.helpers import make_self_package

log = alog.use_channel("TEST")

## Helpers #####################################################################


def make_api_error(error_type, status, reason):
    return error_type(ApiException(status=status, reason=reason))


def setup_client():
    """Make a client with a mocked dynamic client and return both along with
    the mocked resource handle
    """
    cluster_client = OpenshiftClusterClient()
    dynamic_client = mock.MagicMock()
    resource_handle = mock.MagicMock()
    dynamic_client.resources.get.return_value = resource_handle
    cluster_client._client = dynamic_client
    return cluster_client, dynamic_client, resource_handle


## Tests #######################################################################


def test_construct_does_not_connect():
    """Make sure constructing the client never talks to the cluster"""
    with mock.patch.object(OpenshiftClusterClient, "_setup_client") as setup_mock:
        OpenshiftClusterClient()
        setup_mock.assert_not_called()


def test_setup_client_falls_back_to_kubeconfig():
    """Make sure the kubeconfig is used when not running in a cluster"""
    with mock.patch(
        "kubernetes.config.load_incluster_config",
        side_effect=kubernetes.config.ConfigException,
    ), mock.patch(
        "kubernetes.config.new_client_from_config"
    ) as new_client_mock, mock.patch.object(
        openshift_cluster_client, "DynamicClient"
    ) as dynamic_client_mock:
        client = OpenshiftClusterClient().client
        new_client_mock.assert_called_once()
        dynamic_client_mock.assert_called_once_with(new_client_mock.return_value)
        assert client is dynamic_client_mock.return_value


def test_create_success():
    """Make sure create sends the body with the field manager"""
    cluster_client, dynamic_client, handle = setup_client()
    body = make_self_package()
    handle.create.return_value.to_dict.return_value = body
    assert cluster_client.create(body) == body
    dynamic_client.resources.get.assert_called_once_with(
        kind=body["kind"], api_version=body["apiVersion"]
    )
    handle.create.assert_called_once_with(
        body=body,
        namespace=None,
        field_manager=openshift_cluster_client.FIELD_MANAGER,
    )


def test_create_conflict():
    """Make sure a 409 on create is reported as AlreadyExistsError"""
    cluster_client, _, handle = setup_client()
    handle.create.side_effect = make_api_error(ConflictError, 409, "Conflict")
    with pytest.raises(AlreadyExistsError):
        cluster_client.create(make_self_package())


def test_create_server_error():
    """Make sure other API errors become a ClusterError with the status"""
    cluster_client, _, handle = setup_client()
    handle.create.side_effect = make_api_error(InternalServerError, 500, "Boom")
    with pytest.raises(ClusterError) as exc:
        cluster_client.create(make_self_package())
    assert exc.value.status == 500


def test_get_not_found():
    """Make sure a 404 on get is reported as NotFoundError"""
    cluster_client, _, handle = setup_client()
    handle.get.side_effect = make_api_error(DynamicNotFoundError, 404, "NotFound")
    with pytest.raises(NotFoundError):
        cluster_client.get("ClusterPackage", "package-operator")


def test_get_unknown_kind_refreshes_discovery_once():
    """Make sure an unknown kind triggers a single discovery refresh and is
    then reported as NoKindMatchError
    """
    cluster_client, dynamic_client, _ = setup_client()
    dynamic_client.resources.get.side_effect = ResourceNotFoundError("nope")
    with pytest.raises(NoKindMatchError):
        cluster_client.get("ClusterPackage", "package-operator", api_version="a/v1")
    assert dynamic_client.resources.get.call_count == 2
    dynamic_client.resources.invalidate_cache.assert_called_once()


def test_get_kind_found_after_refresh():
    """Make sure a kind registered during this run is found after the
    discovery refresh
    """
    cluster_client, dynamic_client, handle = setup_client()
    dynamic_client.resources.get.side_effect = [ResourceNotFoundError("nope"), handle]
    handle.get.return_value.to_dict.return_value = {"kind": "ClusterPackage"}
    assert cluster_client.get("ClusterPackage", "package-operator") == {
        "kind": "ClusterPackage"
    }


def test_update_uses_replace():
    """Make sure update replaces the full object"""
    cluster_client, _, handle = setup_client()
    body = make_self_package()
    handle.replace.return_value.to_dict.return_value = body
    assert cluster_client.update(body) == body
    handle.replace.assert_called_once_with(
        body=body,
        name=body["metadata"]["name"],
        namespace=None,
        field_manager=openshift_cluster_client.FIELD_MANAGER,
    )


def test_update_conflict_is_cluster_error():
    """Make sure a stale resourceVersion on update is a ClusterError"""
    cluster_client, _, handle = setup_client()
    handle.replace.side_effect = make_api_error(ConflictError, 409, "Conflict")
    with pytest.raises(ClusterError) as exc:
        cluster_client.update(make_self_package())
    assert exc.value.status == 409


def test_set_status():
    """Make sure set_status writes the status subresource of the current
    object
    """
    cluster_client, _, handle = setup_client()
    current = make_self_package()
    handle.get.return_value.to_dict.return_value = current
    new_status = {"conditions": []}
    cluster_client.set_status(
        kind=current["kind"],
        name=current["metadata"]["name"],
        namespace=None,
        status=new_status,
        api_version=current["apiVersion"],
    )
    sent = handle.status.replace.call_args.kwargs["body"]
    assert sent["status"] == new_status
    assert sent["spec"] == current["spec"]
