"""
This module implements custom exceptions
"""

## Base Error ##################################################################


class PkgOpError(Exception):
    """Base class for all pkgop exceptions"""

    def __init__(self, message: str, is_fatal_error: bool):
        """Construct with a flag indicating whether this is a fatal error. This
        will be a static property of all children.
        """
        super().__init__(message)
        self._is_fatal_error = is_fatal_error

    @property
    def is_fatal_error(self):
        """Property indicating whether or not this error should terminate the
        bootstrap process
        """
        return self._is_fatal_error


## Fatal Errors ################################################################


class PkgOpFatalError(PkgOpError):
    """A PkgOpFatalError is one that indicates an unexpected, and likely
    unrecoverable, failure during bootstrap. These are never retried in process.
    The surrounding platform is expected to restart the process.
    """

    def __init__(self, message: str = ""):
        super().__init__(message=message, is_fatal_error=True)


class LoadError(PkgOpFatalError):
    """Exception indicating that a package definition is malformed or cannot be
    resolved
    """

    def __init__(self, message: str = "", path: str = None):
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class ConfigError(PkgOpFatalError):
    """Exception caused during usage of user-provided configuration"""


class ClusterError(PkgOpFatalError):
    """Exception caused when a cluster operation fails in an unexpected way"""

    def __init__(self, message: str = "", status: int = None):
        self.status = status
        super().__init__(message)


class BootstrapInProgressError(PkgOpFatalError):
    """Exception raised when the self package exists but has not been unpacked
    yet. Another process is bootstrapping the cluster.
    """


class ReadinessError(PkgOpFatalError):
    """Exception raised when the readiness of the self package could not be
    determined
    """


class ReadinessTimeoutError(ReadinessError):
    """Exception raised when a configured readiness deadline expires"""


class ManagerError(PkgOpFatalError):
    """Exception raised when the manager fails to start or terminates before
    bootstrap completes
    """


## Expected Errors #############################################################


class PkgOpExpectedError(PkgOpError):
    """A PkgOpExpectedError is one that indicates an expected condition
    reported by the cluster API that callers are expected to handle
    """

    def __init__(self, message: str = ""):
        super().__init__(message=message, is_fatal_error=False)


class AlreadyExistsError(PkgOpExpectedError):
    """The object being created already exists in the cluster"""


class NotFoundError(PkgOpExpectedError):
    """The requested object does not exist in the cluster"""


class NoKindMatchError(PkgOpExpectedError):
    """The cluster has no API registered for the requested kind"""


## Assertions ##################################################################


def assert_config(condition: bool, message: str = ""):
    """Replacement for assert() which will throw a ConfigError. This should be
    used when validating the library config or command line arguments.
    """
    if not condition:
        raise ConfigError(message)


def assert_package(condition: bool, message: str = "", path: str = None):
    """Replacement for assert() which will throw a LoadError. This should be
    used when validating the content of a package folder.
    """
    if not condition:
        raise LoadError(message, path=path)
