"""
Bootstrap the package operator into the cluster and hand off to the manager
"""

# Standard
import argparse
import sys

# First Party
import alog

# Local
from .. import config
from ..bootstrap import run_bootstrap
from ..manager import make_manager_factory
from .base import CmdBase

log = alog.use_channel("MAIN")


class BootstrapCmd(CmdBase):
    __doc__ = __doc__

    ## Interface ##

    def add_subparser(
        self,
        subparsers: argparse._SubParsersAction,
    ) -> argparse.ArgumentParser:
        parser = subparsers.add_parser("bootstrap", help=__doc__)
        runtime_args = parser.add_argument_group("Runtime Configuration")
        self.add_resource_dir_arg(runtime_args)
        return parser

    def cmd(self, args: argparse.Namespace):
        cluster_client = self.get_cluster_client(args)
        manager_factory = make_manager_factory(cluster_client)
        exit_code = run_bootstrap(
            cluster_client=cluster_client,
            manager_factory=manager_factory,
            package_dir=config.package_dir,
            self_image=config.self_bootstrap_image,
        )
        log.info("SHUTTING DOWN")
        sys.exit(exit_code)
