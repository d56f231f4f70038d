"""
Custom logging formats that contain more detailed pkgop logs
"""

# First Party
from alog import AlogJsonFormatter


class PkgOpJsonFormatter(AlogJsonFormatter):
    """Custom Log Format that extends AlogJsonFormatter to add process and
    thread information along with the identity of the resource a log line is
    about. Pass the resource with extra={"resource": manifest} on a log call.
    """

    _FIELDS_TO_PRINT = AlogJsonFormatter._FIELDS_TO_PRINT + [
        "process",
        "thread",
        "threadName",
        "kind",
        "apiVersion",
        "resourceName",
        "resourceNamespace",
        "bootstrapImage",
    ]

    def __init__(self, bootstrap_image=None):
        super().__init__()
        self.bootstrap_image = bootstrap_image

    def format(self, record):
        if self.bootstrap_image:
            record.bootstrapImage = self.bootstrap_image

        if resource := getattr(record, "resource", None):
            record.kind = resource.get("kind")
            record.apiVersion = resource.get("apiVersion")

            metadata = resource.get("metadata", {})
            record.resourceName = metadata.get("name")
            record.resourceNamespace = metadata.get("namespace")

        return super().format(record)
