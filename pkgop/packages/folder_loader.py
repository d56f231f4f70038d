"""
The FolderLoader reads a package definition from a directory on the local
filesystem. The layout of a package folder is:

    <package>/
        manifest.yaml           PackageManifest declaring the ordered phases
        crds/foo.yaml           Objects, one or more yaml documents per file
        deploy.yaml.tmpl        Templated objects, rendered before parsing
        ...

Every object names its phase with the package-operator.run/phase annotation.
Phases are ordered as declared in the manifest. Objects within a phase are
ordered by the sorted relative path of their file and then by their position
within the file.
"""

# Standard
from typing import Dict, List, Optional, Tuple
import os

# Third Party
import yaml

# First Party
import alog

# Local
from .. import constants
from ..exceptions import LoadError, assert_package
from .template import TemplateContext, render_template
from .types import PackageDefinition, PackageObject, Phase

log = alog.use_channel("LOADR")


class FolderLoader:
    """Loader for packages stored as a folder of yaml files"""

    def load(
        self,
        path: str,
        template_context: Optional[TemplateContext] = None,
    ) -> PackageDefinition:
        """Load and fully render the package at the given path

        Args:
            path:  str
                The root directory of the package
            template_context:  Optional[TemplateContext]
                The values used to render templated files

        Returns:
            package:  PackageDefinition
                The ordered phases and objects of the package

        Raises:
            LoadError: If the package is malformed or cannot be rendered
        """
        template_context = template_context or TemplateContext()
        assert_package(os.path.isdir(path), "package directory not found", path=path)
        log.debug("Loading package from [%s]", path)

        manifest_path, manifest = self._load_manifest(path)
        phase_names = self._get_phase_names(manifest, manifest_path)
        phases = {name: Phase(name=name) for name in phase_names}

        for rel_path in self._list_object_files(path):
            file_path = os.path.join(path, rel_path)
            for obj in self._load_objects(file_path, template_context):
                phase_name = obj.annotations.get(constants.PACKAGE_PHASE_ANNOTATION)
                assert_package(
                    phase_name,
                    f"object {obj} has no {constants.PACKAGE_PHASE_ANNOTATION} annotation",
                    path=file_path,
                )
                assert_package(
                    phase_name in phases,
                    f"object {obj} references unknown phase [{phase_name}]",
                    path=file_path,
                )
                log.debug3("Adding %s to phase [%s]", obj, phase_name)
                phases[phase_name].objects.append(obj)

        package_name = (manifest.get("metadata") or {}).get("name")
        package = PackageDefinition(
            name=package_name or os.path.basename(os.path.normpath(path)),
            phases=[phases[name] for name in phase_names],
            scopes=(manifest.get("spec") or {}).get("scopes") or [],
        )
        log.debug(
            "Loaded package [%s] with %d phases and %d objects",
            package.name,
            len(package.phases),
            sum(len(phase.objects) for phase in package.phases),
        )
        return package

    ## Implementation Details ##################################################

    @staticmethod
    def _load_manifest(path: str) -> Tuple[str, dict]:
        """Find, parse and validate the PackageManifest"""
        manifest_path = None
        for fname in constants.PACKAGE_MANIFEST_FILES:
            candidate = os.path.join(path, fname)
            if os.path.isfile(candidate):
                manifest_path = candidate
                break
        assert_package(
            manifest_path is not None,
            f"no package manifest found, expected one of {constants.PACKAGE_MANIFEST_FILES}",
            path=path,
        )

        try:
            manifest = yaml.safe_load(_read_file(manifest_path))
        except yaml.YAMLError as err:
            raise LoadError(f"invalid yaml: {err}", path=manifest_path) from err

        assert_package(
            isinstance(manifest, dict), "manifest is not a mapping", path=manifest_path
        )
        assert_package(
            manifest.get("kind") == constants.PACKAGE_MANIFEST_KIND,
            f"manifest kind must be {constants.PACKAGE_MANIFEST_KIND}",
            path=manifest_path,
        )
        metadata = _get_mapping(manifest, "metadata", manifest_path)
        assert_package(
            isinstance(metadata.get("name"), (str, type(None))),
            "metadata.name must be a string",
            path=manifest_path,
        )
        api_version = manifest.get("apiVersion") or ""
        assert_package(
            isinstance(api_version, str)
            and api_version.split("/")[0] == constants.PACKAGE_MANIFEST_GROUP,
            f"unsupported manifest apiVersion [{api_version}]",
            path=manifest_path,
        )
        scopes = _get_mapping(manifest, "spec", manifest_path).get("scopes") or []
        assert_package(
            isinstance(scopes, list)
            and all(scope in constants.PACKAGE_SCOPES for scope in scopes),
            f"scopes must be a list of {constants.PACKAGE_SCOPES}",
            path=manifest_path,
        )
        return manifest_path, manifest

    @staticmethod
    def _get_phase_names(manifest: dict, manifest_path: str) -> List[str]:
        """Get the ordered list of unique phase names from the manifest"""
        phases = (manifest.get("spec") or {}).get("phases")
        assert_package(
            isinstance(phases, list), "spec.phases must be a list", path=manifest_path
        )
        names = []
        for phase in phases:
            name = phase.get("name") if isinstance(phase, dict) else None
            assert_package(name, "phase without a name", path=manifest_path)
            assert_package(
                isinstance(name, str),
                f"phase name {name!r} is not a string",
                path=manifest_path,
            )
            assert_package(
                name not in names, f"duplicate phase [{name}]", path=manifest_path
            )
            names.append(name)
        return names

    @staticmethod
    def _list_object_files(path: str) -> List[str]:
        """List the relative paths of all object files in a stable order"""
        manifest_files = set(constants.PACKAGE_MANIFEST_FILES)
        object_files = []
        for root, dirs, files in os.walk(path):
            dirs[:] = [dname for dname in dirs if not dname.startswith(".")]
            for fname in files:
                rel_path = os.path.relpath(os.path.join(root, fname), path)
                if fname.startswith(".") or rel_path in manifest_files:
                    continue
                base = fname
                if base.endswith(constants.PACKAGE_TEMPLATE_SUFFIX):
                    base = base[: -len(constants.PACKAGE_TEMPLATE_SUFFIX)]
                if os.path.splitext(base)[1] in constants.PACKAGE_OBJECT_EXTENSIONS:
                    object_files.append(rel_path)
                else:
                    log.debug3("Skipping non-object file [%s]", rel_path)

        # Sort on the path components so that ordering does not depend on the
        # platform's directory walk order
        return sorted(object_files, key=lambda rel: rel.split(os.sep))

    @staticmethod
    def _load_objects(
        file_path: str,
        template_context: TemplateContext,
    ) -> List[PackageObject]:
        """Parse all objects in a single file, rendering it first if needed"""
        content = _read_file(file_path)
        if file_path.endswith(constants.PACKAGE_TEMPLATE_SUFFIX):
            content = render_template(content, template_context, path=file_path)

        try:
            documents = list(yaml.safe_load_all(content))
        except yaml.YAMLError as err:
            raise LoadError(f"invalid yaml: {err}", path=file_path) from err

        objects = []
        for idx, doc in enumerate(documents):
            if doc is None:
                continue
            assert_package(
                isinstance(doc, dict),
                f"document {idx} is not a mapping",
                path=file_path,
            )
            missing = _missing_identity_fields(doc)
            assert_package(
                not missing,
                f"document {idx} has missing or invalid fields {missing}",
                path=file_path,
            )
            _check_metadata(doc, idx, file_path)
            objects.append(PackageObject(doc, source=file_path))
        log.debug2("Parsed %d objects from [%s]", len(objects), file_path)
        return objects


def _missing_identity_fields(doc: Dict) -> List[str]:
    """Get the list of identity fields a document does not set as strings"""
    missing = [
        key
        for key in ["apiVersion", "kind"]
        if not doc.get(key) or not isinstance(doc[key], str)
    ]
    metadata = doc.get("metadata")
    name = metadata.get("name") if isinstance(metadata, dict) else None
    if not name or not isinstance(name, str):
        missing.append("metadata.name")
    return missing


def _read_file(file_path: str) -> str:
    try:
        with open(file_path, encoding="utf-8") as handle:
            return handle.read()
    except UnicodeDecodeError as err:
        raise LoadError(f"file is not valid utf-8: {err}", path=file_path) from err
    except OSError as err:
        raise LoadError(f"cannot read file: {err}", path=file_path) from err


def _get_mapping(parent: Dict, key: str, path: str) -> Dict:
    """Get an optional mapping field, treating a missing value as empty"""
    value = parent.get(key)
    if value is None:
        return {}
    assert_package(isinstance(value, dict), f"{key} must be a mapping", path=path)
    return value


def _check_metadata(doc: Dict, idx: int, file_path: str):
    """Validate the parts of an object's metadata that the loader reads"""
    metadata = doc["metadata"]
    for key in ["labels", "annotations"]:
        _get_mapping(metadata, key, f"{file_path} (document {idx})")
    phase = (metadata.get("annotations") or {}).get(constants.PACKAGE_PHASE_ANNOTATION)
    assert_package(
        isinstance(phase, (str, type(None))),
        f"document {idx} phase annotation must be a string",
        path=file_path,
    )
