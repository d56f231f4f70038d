"""
In-memory representation of a loaded package: an ordered list of phases, each
holding an ordered list of objects
"""

# Standard
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, NamedTuple, Optional

# Local
from .. import constants


class GroupKind(NamedTuple):
    """The group/kind identity of an API object"""

    group: str
    kind: str

    def __str__(self):
        return f"{self.kind}.{self.group}" if self.group else self.kind


CRD_GROUP_KIND = GroupKind(constants.CRD_GROUP, constants.CRD_KIND)


class PackageObject:
    """Basic struct to represent a single API object of a package. The object
    body is kept as a plain dict so that it can be sent to the cluster as is.
    """

    def __init__(self, definition: dict, source: Optional[str] = None):
        self.definition = definition
        self.source = source
        assert self.api_version is not None, "No apiVersion found"
        assert self.kind is not None, "No kind found"
        assert self.name is not None, "No name found"

    @property
    def api_version(self) -> Optional[str]:
        return self.definition.get("apiVersion")

    @property
    def kind(self) -> Optional[str]:
        return self.definition.get("kind")

    @property
    def metadata(self) -> dict:
        return self.definition.setdefault("metadata", {})

    @property
    def name(self) -> Optional[str]:
        return self.metadata.get("name")

    @property
    def namespace(self) -> Optional[str]:
        return self.metadata.get("namespace")

    @property
    def group(self) -> str:
        """The API group of the object. The core group is the empty string."""
        if "/" in self.api_version:
            return self.api_version.split("/", 1)[0]
        return ""

    @property
    def version(self) -> str:
        return self.api_version.split("/")[-1]

    @property
    def group_kind(self) -> GroupKind:
        return GroupKind(self.group, self.kind)

    @property
    def labels(self) -> Dict[str, str]:
        return self.metadata.get("labels") or {}

    @property
    def annotations(self) -> Dict[str, str]:
        return self.metadata.get("annotations") or {}

    def set_label(self, key: str, value: str):
        """Set a label on the object body, creating the labels map if needed"""
        labels = self.metadata.get("labels") or {}
        labels[key] = value
        self.metadata["labels"] = labels

    def get(self, *args, **kwargs):
        """Pass get calls to the objects definition"""
        return self.definition.get(*args, **kwargs)

    def __str__(self):
        if self.namespace:
            return f"{self.api_version}/{self.kind}/{self.namespace}/{self.name}"
        return f"{self.api_version}/{self.kind}/{self.name}"

    def __repr__(self):
        return str(self)


@dataclass
class Phase:
    """An ordered group of objects applied as a unit before the next phase"""

    name: str
    objects: List[PackageObject] = field(default_factory=list)


@dataclass
class PackageDefinition:
    """A fully loaded and rendered package"""

    name: str
    phases: List[Phase] = field(default_factory=list)
    scopes: List[str] = field(default_factory=list)

    def iter_objects(self) -> Iterator[PackageObject]:
        """Iterate all objects in application order"""
        for phase in self.phases:
            yield from phase.objects

    def get_phase(self, name: str) -> Optional[Phase]:
        for phase in self.phases:
            if phase.name == name:
                return phase
        return None
