"""
Run the manager directly without bootstrapping
"""

# Standard
import argparse
import signal

# First Party
import alog

# Local
from .. import config
from ..exceptions import ManagerError
from ..manager import ManagerOptions, make_manager_factory
from .base import CmdBase

log = alog.use_channel("MAIN")


class RunManagerCmd(CmdBase):
    __doc__ = __doc__

    ## Interface ##

    def add_subparser(
        self,
        subparsers: argparse._SubParsersAction,
    ) -> argparse.ArgumentParser:
        parser = subparsers.add_parser("run", help=__doc__)
        runtime_args = parser.add_argument_group("Runtime Configuration")
        self.add_resource_dir_arg(runtime_args)
        return parser

    def cmd(self, args: argparse.Namespace):
        cluster_client = self.get_cluster_client(args)
        manager = make_manager_factory(cluster_client)(
            ManagerOptions(self_bootstrap_image=config.self_bootstrap_image)
        )

        # Register the signal handler to stop the manager
        def do_stop(*_, **__):  # pragma: no cover
            manager.stop()

        signal.signal(signal.SIGINT, do_stop)
        signal.signal(signal.SIGTERM, do_stop)

        log.info("Starting manager %s", manager)
        if not manager.start():
            raise ManagerError(f"Failed to start manager {manager}")
        manager.wait()

        # All done!
        log.info("SHUTTING DOWN")
