"""
Tests for the CRD pre-installer
"""

# Standard
from unittest import mock

# Third Party
import pytest

# Local
from pkgop import constants
from pkgop.bootstrap import crd_installer, install_crds
from pkgop.exceptions import AlreadyExistsError, ClusterError
from pkgop.packages import FolderLoader
from pkgop.test_helpers.helpers import (
    FailOnce,
    MockClusterClient,
    make_crd,
    make_manifest,
    make_object,
    write_package,
)


@pytest.fixture
def package(tmp_path):
    write_package(
        str(tmp_path),
        {
            "a.yaml": [
                make_object("Namespace", "pko-system", "crds"),
                make_crd(kind="ClusterPackage"),
            ],
            "b.yaml": [make_crd(kind="Package"), make_crd(kind="ObjectSet")],
        },
        manifest=make_manifest(phases=["crds"]),
    )
    return FolderLoader().load(str(tmp_path))


def test_only_crds_created_in_order(package):
    """Make sure only CRDs are created, in package order, with the cache
    label applied
    """
    client = MockClusterClient()
    crds = install_crds(client, package)
    assert [crd.get("spec")["names"]["kind"] for crd in crds] == [
        "ClusterPackage",
        "Package",
        "ObjectSet",
    ]
    assert client.created_kinds() == [constants.CRD_KIND] * 3
    for call in client.create.call_args_list:
        labels = call.args[0]["metadata"]["labels"]
        assert labels[constants.DYNAMIC_CACHE_LABEL] == "True"
    for crd in client.list_objects(constants.CRD_KIND):
        assert crd["metadata"]["labels"][constants.DYNAMIC_CACHE_LABEL] == "True"
    assert not client.list_objects("Namespace")


def test_idempotent(package):
    """Make sure running twice against the same cluster succeeds and leaves a
    single copy of each CRD
    """
    client = MockClusterClient()
    install_crds(client, package)
    install_crds(client, package)
    assert client.create.call_count == 6
    assert len(client.list_objects(constants.CRD_KIND)) == 3


def test_conflict_swallowed(package):
    """Make sure an AlreadyExistsError does not stop the remaining CRDs"""
    client = MockClusterClient(create_fail=FailOnce(AlreadyExistsError))
    install_crds(client, package)
    assert len(client.list_objects(constants.CRD_KIND)) == 2


def test_other_error_aborts(package):
    """Make sure any other error aborts the install"""
    client = MockClusterClient(
        create_fail=FailOnce(ClusterError("boom", status=500), fail_number=2)
    )
    with pytest.raises(ClusterError):
        install_crds(client, package)
    assert client.create.call_count == 2
    assert len(client.list_objects(constants.CRD_KIND)) == 1


def test_crd_logs_carry_resource(package):
    """Make sure created and existing CRD log lines carry the CRD so the json
    formatter can add its identity
    """
    client = MockClusterClient(create_fail=FailOnce(AlreadyExistsError))
    with mock.patch.object(crd_installer.log, "info") as log_info:
        crds = install_crds(client, package)
    resources = [call.kwargs["extra"]["resource"] for call in log_info.call_args_list]
    assert resources == [crd.definition for crd in crds]
    assert "already exists" in log_info.call_args_list[0].args[0]
