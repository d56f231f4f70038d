"""
Shared interface and cluster wiring for the pkgop subcommands
"""

# Standard
from typing import List, Optional
import abc
import argparse
import os

# Third Party
import yaml

# First Party
import alog

# Local
from .. import config
from ..cluster import ClusterClientBase, DryRunClusterClient, OpenshiftClusterClient
from ..exceptions import assert_config

log = alog.use_channel("CMD")

# Files under --resource_dir that are read as cluster objects
_RESOURCE_SUFFIXES = (".yaml", ".yml")


class CmdBase(abc.ABC):
    """A CmdBase is one subcommand of the pkgop entrypoint"""

    @abc.abstractmethod
    def add_subparser(
        self,
        subparsers: argparse._SubParsersAction,
    ) -> argparse.ArgumentParser:
        """Register the subcommand with the top-level parser and return the
        subcommand's own parser
        """

    @abc.abstractmethod
    def cmd(self, args: argparse.Namespace):
        """Run the subcommand"""

    ## Shared Helpers ##########################################################

    @staticmethod
    def add_resource_dir_arg(parser: argparse.ArgumentParser):
        """Add the dry run flag for pre-populating the in-memory cluster"""
        parser.add_argument(
            "--resource_dir",
            "-r",
            help="(dry run) Directory of yaml objects to seed the in-memory cluster",
        )

    @staticmethod
    def parse_resource_dir(resource_dir: Optional[str]) -> List[dict]:
        """Read every non-empty yaml document from the files in resource_dir,
        in file name order
        """
        if resource_dir is None:
            return []
        resources = []
        file_names = sorted(
            name
            for name in os.listdir(resource_dir)
            if name.endswith(_RESOURCE_SUFFIXES)
        )
        for file_name in file_names:
            path = os.path.join(resource_dir, file_name)
            log.debug3("Loading seed resources from [%s]", path)
            with open(path, encoding="utf-8") as handle:
                resources.extend(filter(None, yaml.safe_load_all(handle)))
        return resources

    @classmethod
    def get_cluster_client(cls, args: argparse.Namespace) -> ClusterClientBase:
        """Build the cluster client selected by the library config"""
        resource_dir = getattr(args, "resource_dir", None)
        if resource_dir is not None:
            assert_config(config.dry_run, "--resource_dir is only valid with dry_run")
            assert_config(
                os.path.isdir(resource_dir),
                f"--resource_dir {resource_dir} is not a directory",
            )
        if not config.dry_run:
            return OpenshiftClusterClient()
        log.info("Using in-memory DRY RUN cluster")
        return DryRunClusterClient(resources=cls.parse_resource_dir(resource_dir))
