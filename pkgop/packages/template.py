"""
Minimal templating for package files. Templates use ${dotted.key} placeholders
that are resolved against the TemplateContext. A literal "$" is written "$$".
"""

# Standard
from dataclasses import asdict, dataclass, field
from string import Template
from typing import Any, Dict
import collections.abc

# First Party
import alog

# Local
from ..exceptions import LoadError
from ..utils import __MISSING__, nested_get

log = alog.use_channel("TMPLT")


@dataclass
class TemplateContext:
    """Values available to package templates

    Attributes:
        package:  Dict[str, Any]
            Metadata of the package instance being rendered (name, namespace)
        config:  Dict[str, Any]
            Free-form configuration passed to the package
        images:  Dict[str, str]
            Mapping from image names to resolved image references
    """

    package: Dict[str, Any] = field(default_factory=dict)
    config: Dict[str, Any] = field(default_factory=dict)
    images: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)


class PackageTemplate(Template):
    """Template subclass allowing dotted identifiers like ${config.replicas}"""

    idpattern = r"(?a:[_a-z][_a-z0-9]*(?:\.[_a-z][_a-z0-9]*)*)"


class _NestedLookup(collections.abc.Mapping):
    """Read-only mapping view that resolves dotted keys into a nested dict"""

    def __init__(self, values: dict):
        self._values = values

    def __getitem__(self, key: str):
        val = nested_get(self._values, key, __MISSING__)
        if val is __MISSING__:
            raise KeyError(key)
        return val

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)


def render_template(content: str, context: TemplateContext, path: str = None) -> str:
    """Render a template string against the given context

    Args:
        content:  str
            The raw template content
        context:  TemplateContext
            The values to substitute
        path:  str
            The file the template came from, used in error messages

    Returns:
        rendered:  str
            The fully substituted content
    """
    log.debug2("Rendering template [%s]", path)
    try:
        return PackageTemplate(content).substitute(_NestedLookup(context.to_dict()))
    except KeyError as err:
        raise LoadError(f"unresolvable template key {err}", path=path) from err
    except (ValueError, TypeError) as err:
        raise LoadError(f"invalid template: {err}", path=path) from err
