"""
This module holds common helper functions for making testing easy
"""

# Standard
from contextlib import contextmanager
from typing import Dict, List, Optional
from unittest import mock
import copy
import inspect
import os
import threading

# Third Party
import yaml

# First Party
import alog

# Local
from pkgop import constants, status
from pkgop.cluster import DryRunClusterClient
from pkgop.config import library_config as config_detail_dict
from pkgop.manager import ManagerBase, ManagerOptions

log = alog.use_channel("TEST")


def configure_logging():
    alog.configure(
        os.environ.get("LOG_LEVEL", "off"),
        os.environ.get("LOG_FILTERS", ""),
        formatter="json"
        if os.environ.get("LOG_JSON", "").lower() == "true"
        else "pretty",
        thread_id=os.environ.get("LOG_THREAD_ID", "").lower() == "true",
    )


configure_logging()

TEST_IMAGE = "quay.io/package-operator/package-operator-package:v1.2.3"
TEST_OLD_IMAGE = "quay.io/package-operator/package-operator-package:v1.2.2"
SELF_PACKAGE_NAME = "package-operator"
CLUSTER_PACKAGE_CRD_NAME = "clusterpackages.package-operator.run"


@contextmanager
def library_config(**config_overrides):
    """Temporarily replace top-level library config values within the context"""
    missing = object()
    saved = {key: config_detail_dict.get(key, missing) for key in config_overrides}
    for key, val in config_overrides.items():
        config_detail_dict[key] = val
    try:
        yield
    finally:
        for key, val in saved.items():
            if val is missing:
                del config_detail_dict[key]
            else:
                config_detail_dict[key] = val


def _is_exception(fail_val) -> bool:
    return isinstance(fail_val, Exception) or (
        inspect.isclass(fail_val) and issubclass(fail_val, Exception)
    )


def get_failable_method(fail_flag, method):
    """Wrap method so that fail_flag is applied before the real call. An
    exception flag is raised. A callable flag is called with the same args and a
    non-None result replaces the real one.
    """

    def failable_method(*args, **kwargs):
        if _is_exception(fail_flag):
            log.debug4("Injecting failure %s into %s", fail_flag, method)
            raise fail_flag
        if callable(fail_flag):
            injected = fail_flag(*args, **kwargs)
            if injected is not None:
                return injected
        return method(*args, **kwargs)

    return failable_method


class FailOnce:
    """Fail flag that only takes effect on the fail_number'th call"""

    def __init__(self, fail_val, fail_number=1):
        self.call_count = 0
        self.fail_number = fail_number
        self.fail_val = fail_val

    def __call__(self, *_, **__):
        self.call_count += 1
        if self.call_count != self.fail_number:
            return None
        log.debug("Injecting %s on call %d", self.fail_val, self.call_count)
        if inspect.isclass(self.fail_val) and issubclass(self.fail_val, Exception):
            raise self.fail_val(f"Injected failure on call {self.call_count}")
        if isinstance(self.fail_val, Exception):
            raise self.fail_val
        return self.fail_val


## Cluster #####################################################################


class MockClusterClient(DryRunClusterClient):
    """The MockClusterClient wraps a standard DryRunClusterClient with mocks
    that record every call and can simulate failures in each operation. A fail
    flag may be an exception (type or instance) to raise, or a callable run
    before the real operation.
    """

    def __init__(
        self,
        create_fail=None,
        get_fail=None,
        update_fail=None,
        set_status_fail=None,
        resources=None,
        **kwargs,
    ):
        super().__init__(resources=resources, **kwargs)
        self.create = mock.Mock(
            side_effect=get_failable_method(create_fail, super().create)
        )
        self.get = mock.Mock(side_effect=get_failable_method(get_fail, super().get))
        self.update = mock.Mock(
            side_effect=get_failable_method(update_fail, super().update)
        )
        self.set_status = mock.Mock(
            side_effect=get_failable_method(set_status_fail, super().set_status)
        )

    def created_kinds(self) -> List[str]:
        """The kinds of all create calls in call order"""
        return [call.args[0]["kind"] for call in self.create.call_args_list]

    def get_obj(self, kind, name, namespace=None, api_version=None) -> Optional[dict]:
        matches = [
            obj
            for obj in self.list_objects(kind)
            if obj["metadata"]["name"] == name
            and obj["metadata"].get("namespace") == namespace
            and (api_version is None or obj["apiVersion"] == api_version)
        ]
        return matches[0] if matches else None

    def has_obj(self, *args, **kwargs) -> bool:
        return self.get_obj(*args, **kwargs) is not None


def make_self_package(
    image: str = TEST_OLD_IMAGE,
    unpacked: Optional[bool] = None,
    available: Optional[bool] = None,
    name: str = SELF_PACKAGE_NAME,
) -> dict:
    """Make a self package resource with the given conditions. A condition
    left as None is not present at all.
    """
    conditions = []
    if unpacked is not None:
        conditions.append(
            status.make_condition(
                constants.PACKAGE_UNPACKED_CONDITION, unpacked, "Unpack"
            )
        )
    if available is not None:
        conditions.append(
            status.make_condition(
                constants.PACKAGE_AVAILABLE_CONDITION, available, "Probe"
            )
        )
    resource = {
        "apiVersion": constants.CLUSTER_PACKAGE_API_VERSION,
        "kind": constants.CLUSTER_PACKAGE_KIND,
        "metadata": {"name": name, "resourceVersion": "1"},
        "spec": {"image": image},
    }
    if conditions:
        resource["status"] = {"conditions": conditions}
    return resource


## Packages ####################################################################


def make_crd(
    kind: str = constants.CLUSTER_PACKAGE_KIND,
    group: str = constants.PACKAGE_OPERATOR_GROUP,
    plural: Optional[str] = None,
    versions=("v1alpha1",),
    phase: str = "crds",
) -> dict:
    plural = plural or f"{kind.lower()}s"
    return {
        "apiVersion": f"{constants.CRD_GROUP}/v1",
        "kind": constants.CRD_KIND,
        "metadata": {
            "name": f"{plural}.{group}",
            "annotations": {constants.PACKAGE_PHASE_ANNOTATION: phase},
        },
        "spec": {
            "group": group,
            "names": {"kind": kind, "plural": plural},
            "scope": "Cluster",
            "versions": [
                {"name": version, "served": True, "storage": i == 0}
                for i, version in enumerate(versions)
            ],
        },
    }


def make_object(
    kind: str,
    name: str,
    phase: str,
    api_version: str = "v1",
    namespace: Optional[str] = None,
    **kwargs,
) -> dict:
    obj = {
        "apiVersion": api_version,
        "kind": kind,
        "metadata": {
            "name": name,
            "annotations": {constants.PACKAGE_PHASE_ANNOTATION: phase},
        },
    }
    if namespace:
        obj["metadata"]["namespace"] = namespace
    obj.update(kwargs)
    return obj


def make_manifest(phases=("crds", "deploy"), name="package-operator", scopes=None):
    manifest = {
        "apiVersion": f"{constants.PACKAGE_MANIFEST_GROUP}/v1alpha1",
        "kind": constants.PACKAGE_MANIFEST_KIND,
        "metadata": {"name": name},
        "spec": {"phases": [{"name": phase} for phase in phases]},
    }
    if scopes is not None:
        manifest["spec"]["scopes"] = scopes
    return manifest


def write_package(
    root: str,
    files: Dict[str, object],
    manifest: Optional[dict] = None,
) -> str:
    """Write a package folder. Each value in files is either a raw string or a
    list of documents dumped as a multi-document yaml file.

    Returns:
        root:  str
            The package folder
    """
    manifest = make_manifest() if manifest is None else manifest
    files = dict(files)
    files.setdefault("manifest.yaml", [manifest])
    for rel_path, content in files.items():
        full_path = os.path.join(root, rel_path)
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        if not isinstance(content, str):
            content = yaml.safe_dump_all(content)
        with open(full_path, "w", encoding="utf-8") as handle:
            handle.write(content)
    return root


def write_self_package(root: str) -> str:
    """Write a minimal self package with the ClusterPackage CRD and the
    operator deployment
    """
    return write_package(
        root,
        {
            "crds/clusterpackages.yaml": [make_crd()],
            "crds/packages.yaml": [make_crd(kind="Package")],
            "deploy/namespace.yaml": [
                make_object("Namespace", "package-operator-system", "deploy")
            ],
            "deploy/deployment.yaml": [
                make_object(
                    "Deployment",
                    "package-operator-manager",
                    "deploy",
                    api_version="apps/v1",
                    namespace="package-operator-system",
                )
            ],
        },
    )


## Manager #####################################################################


class MockManager(ManagerBase):
    """Manager that records its lifecycle. It runs until stopped unless
    die_after_start is set, in which case it terminates right after starting.
    """

    def __init__(
        self,
        options: ManagerOptions,
        cluster_client=None,
        start_result: bool = True,
        die_after_start: bool = False,
        on_start=None,
    ):
        super().__init__(options, cluster_client)
        self.start_result = start_result
        self.die_after_start = die_after_start
        self.on_start = on_start
        self.events = []
        self._stopped = threading.Event()
        self._started = False

    def start(self) -> bool:
        self.events.append("start")
        if not self.start_result:
            self._stopped.set()
            return False
        self._started = True
        if self.on_start:
            self.on_start(self)
        if self.die_after_start:
            self._stopped.set()
        return True

    def wait(self, timeout=None) -> bool:
        return self._stopped.wait(timeout)

    def stop(self):
        self.events.append("stop")
        self._stopped.set()

    def is_alive(self) -> bool:
        return self._started and not self._stopped.is_set()


class ManagerFactoryRecorder:
    """Manager factory that records the options handed to each manager"""

    def __init__(self, manager_type=MockManager, **manager_kwargs):
        self.manager_type = manager_type
        self.manager_kwargs = manager_kwargs
        self.options = []
        self.managers = []

    def __call__(self, options: ManagerOptions) -> ManagerBase:
        self.options.append(copy.copy(options))
        manager = self.manager_type(options=options, **self.manager_kwargs)
        self.managers.append(manager)
        return manager


## Exit ########################################################################


class ModuleExit(Exception):
    """Raised in place of exiting the process when sys.exit is mocked"""


class TestRecorder:
    """Records the code passed to a mocked sys.exit"""

    __test__ = False

    def __init__(self, raise_on_success=True):
        self.retcode = None
        self.raise_on_success = raise_on_success

    def set_exit_code(self, code=0):
        self.retcode = code
        if self.raise_on_success or code != 0:
            raise ModuleExit(code)


@contextmanager
def mock_sys_exit(recorder: TestRecorder):
    """Route sys.exit to the recorder within the context"""
    with mock.patch("sys.exit", recorder.set_exit_code):
        yield
