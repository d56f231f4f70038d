"""
Test the custom exceptions and assert functions
"""

# Third Party
import pytest

# Local
from pkgop import exceptions


def test_assert_config_pass():
    """Make sure that no exception is throw by assert_config when it
    passes
    """
    exceptions.assert_config(True)


def test_assert_config_fail():
    """Make sure the right exception is thrown by assert_config when it
    fails
    """
    exception_msg = "error mesage"
    with pytest.raises(exceptions.ConfigError, match=exception_msg):
        exceptions.assert_config(False, exception_msg)


def test_assert_package_fail_with_path():
    """Make sure assert_package raises a LoadError that names the offending
    file
    """
    with pytest.raises(exceptions.LoadError, match="some/file.yaml: bad") as exc:
        exceptions.assert_package(False, "bad", path="some/file.yaml")
    assert exc.value.path == "some/file.yaml"


@pytest.mark.parametrize(
    ["error_type", "is_fatal"],
    [
        (exceptions.LoadError, True),
        (exceptions.ConfigError, True),
        (exceptions.ClusterError, True),
        (exceptions.BootstrapInProgressError, True),
        (exceptions.ReadinessError, True),
        (exceptions.ReadinessTimeoutError, True),
        (exceptions.ManagerError, True),
        (exceptions.AlreadyExistsError, False),
        (exceptions.NotFoundError, False),
        (exceptions.NoKindMatchError, False),
    ],
)
def test_is_fatal_error(error_type, is_fatal):
    """Make sure each error type reports the right fatality"""
    assert error_type("msg").is_fatal_error == is_fatal


def test_readiness_timeout_is_readiness_error():
    """Make sure a timeout can be handled as any readiness failure"""
    assert issubclass(exceptions.ReadinessTimeoutError, exceptions.ReadinessError)


def test_cluster_error_status():
    """Make sure the API status code is kept on a ClusterError"""
    assert exceptions.ClusterError("boom", status=500).status == 500
