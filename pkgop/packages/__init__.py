"""
Loading of package definitions from the filesystem
"""

# Local
from .folder_loader import FolderLoader
from .template import TemplateContext, render_template
from .types import CRD_GROUP_KIND, GroupKind, PackageDefinition, PackageObject, Phase
