"""
Shared module to hold constant values for the library
"""

# API group owned by the package operator
PACKAGE_OPERATOR_GROUP = "package-operator.run"

# Identity of the self package resource
CLUSTER_PACKAGE_KIND = "ClusterPackage"
CLUSTER_PACKAGE_API_VERSION = f"{PACKAGE_OPERATOR_GROUP}/v1alpha1"

# Status condition types on packages
PACKAGE_UNPACKED_CONDITION = f"{PACKAGE_OPERATOR_GROUP}/Unpacked"
PACKAGE_AVAILABLE_CONDITION = "Available"

# Label marking objects which must be included in the manager's dynamic cache
DYNAMIC_CACHE_LABEL = f"{PACKAGE_OPERATOR_GROUP}/cache"
DYNAMIC_CACHE_LABEL_VALUE = "True"

# Group/Kind of CustomResourceDefinitions
CRD_GROUP = "apiextensions.k8s.io"
CRD_KIND = "CustomResourceDefinition"

# Package folder layout
PACKAGE_MANIFEST_FILES = ["manifest.yaml", "manifest.yml"]
PACKAGE_MANIFEST_KIND = "PackageManifest"
PACKAGE_MANIFEST_GROUP = f"manifests.{PACKAGE_OPERATOR_GROUP}"
PACKAGE_OBJECT_EXTENSIONS = [".yaml", ".yml"]
PACKAGE_TEMPLATE_SUFFIX = ".tmpl"
PACKAGE_PHASE_ANNOTATION = f"{PACKAGE_OPERATOR_GROUP}/phase"
PACKAGE_SCOPES = ["Cluster", "Namespaced"]

# Delimiter used for nested dict keys
NESTED_DICT_DELIM = "."
