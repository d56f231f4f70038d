"""
This module holds all of the command classes for pkgop's main entrypoint
"""

# Local
from .base import CmdBase
from .bootstrap_cmd import BootstrapCmd
from .run_manager_cmd import RunManagerCmd
