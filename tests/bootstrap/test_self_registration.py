"""
Tests for resolving the self registration state
"""

# Third Party
import pytest

# Local
from pkgop import constants
from pkgop.bootstrap import RegistrationState, SelfRegistration
from pkgop.exceptions import (
    BootstrapInProgressError,
    ClusterError,
    NoKindMatchError,
)
from pkgop.test_helpers.helpers import (
    TEST_IMAGE,
    TEST_OLD_IMAGE,
    MockClusterClient,
    make_self_package,
)


def get_self_package(client):
    return client.get_obj(
        constants.CLUSTER_PACKAGE_KIND,
        "package-operator",
        api_version=constants.CLUSTER_PACKAGE_API_VERSION,
    )


@pytest.mark.parametrize("available", [True, False, None])
def test_already_installed(available):
    """Make sure an unpacked self package gets exactly one image update and no
    creates, whatever its availability
    """
    client = MockClusterClient(
        resources=[make_self_package(unpacked=True, available=available)]
    )
    registration = SelfRegistration(client)
    assert registration.resolve(TEST_IMAGE) == RegistrationState.ALREADY_INSTALLED
    assert registration.state == RegistrationState.ALREADY_INSTALLED
    assert client.update.call_count == 1
    assert client.create.call_count == 0

    updated = get_self_package(client)
    assert updated["spec"] == {"image": TEST_IMAGE}
    assert status_conditions(updated) == status_conditions(
        make_self_package(unpacked=True, available=available)
    )


def status_conditions(resource):
    return [
        (cond["type"], cond["status"])
        for cond in resource.get("status", {}).get("conditions", [])
    ]


def test_needs_bootstrap_not_found():
    """Make sure a missing self package needs a bootstrap without any writes"""
    client = MockClusterClient()
    registration = SelfRegistration(client)
    assert registration.resolve(TEST_IMAGE) == RegistrationState.NEEDS_BOOTSTRAP
    assert client.update.call_count == 0
    assert client.create.call_count == 0


def test_needs_bootstrap_no_kind():
    """Make sure an unserved ClusterPackage kind needs a bootstrap"""
    client = MockClusterClient(get_fail=NoKindMatchError("no kind"))
    assert (
        SelfRegistration(client).resolve(TEST_IMAGE)
        == RegistrationState.NEEDS_BOOTSTRAP
    )
    assert client.update.call_count == 0


@pytest.mark.parametrize("unpacked", [False, None])
def test_found_not_unpacked(unpacked):
    """Make sure a self package that is not unpacked yet is fatal and left
    untouched
    """
    client = MockClusterClient(resources=[make_self_package(unpacked=unpacked)])
    registration = SelfRegistration(client)
    with pytest.raises(BootstrapInProgressError):
        registration.resolve(TEST_IMAGE)
    assert registration.state == RegistrationState.FATAL
    assert client.update.call_count == 0
    assert get_self_package(client)["spec"]["image"] == TEST_OLD_IMAGE


def test_read_error_fatal():
    """Make sure an unexpected read error is fatal and propagated"""
    client = MockClusterClient(get_fail=ClusterError("boom", status=503))
    registration = SelfRegistration(client)
    with pytest.raises(ClusterError):
        registration.resolve(TEST_IMAGE)
    assert registration.state == RegistrationState.FATAL
    assert client.update.call_count == 0


def test_update_error_fatal():
    """Make sure a failed image update is fatal"""
    client = MockClusterClient(
        resources=[make_self_package(unpacked=True)],
        update_fail=ClusterError("conflict", status=409),
    )
    registration = SelfRegistration(client)
    with pytest.raises(ClusterError):
        registration.resolve(TEST_IMAGE)
    assert registration.state == RegistrationState.FATAL


def test_custom_package_name():
    """Make sure the configured package name is the one looked up"""
    client = MockClusterClient(
        resources=[make_self_package(name="other", unpacked=True)]
    )
    assert (
        SelfRegistration(client, package_name="other").resolve(TEST_IMAGE)
        == RegistrationState.ALREADY_INSTALLED
    )
    assert SelfRegistration(client).resolve(TEST_IMAGE) == (
        RegistrationState.NEEDS_BOOTSTRAP
    )
