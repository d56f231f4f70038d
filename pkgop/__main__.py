#!/usr/bin/env python
"""
The main module provides the executable entrypoint for pkgop
"""

# Standard
from typing import Any, Dict, Iterator, Optional, Tuple
import argparse

# First Party
import aconfig
import alog

# Local
from . import config
from .cmd import BootstrapCmd, CmdBase, RunManagerCmd
from .config import library_config
from .log_format import PkgOpJsonFormatter
from .utils import nested_set

## Constants ###################################################################

log = alog.use_channel("MAIN")

# Command run when none is named on the command line
DEFAULT_COMMAND = "bootstrap"

## Helpers #####################################################################

# Maps an argparse dest to the dotted library config key it overrides
ConfigSetters = Dict[str, str]


def _config_leaves(
    config_obj: aconfig.AttributeAccessDict, prefix: str = ""
) -> Iterator[Tuple[str, Any]]:
    """Yield (dotted key, value) for every non-dict value in the config"""
    for key, val in config_obj.items():
        dotted_key = f"{prefix}{key}"
        if isinstance(val, aconfig.AttributeAccessDict):
            yield from _config_leaves(val, f"{dotted_key}.")
        else:
            yield dotted_key, val


def _arg_kwargs(dotted_key: str, default: Any) -> Dict[str, Any]:
    kwargs = {
        "default": default,
        "dest": dotted_key.replace(".", "_"),
        "help": f"Override library config value {dotted_key}",
    }
    if isinstance(default, bool):
        kwargs["action"] = "store_true"
    elif isinstance(default, list):
        kwargs["nargs"] = "*"
    elif default is not None:
        kwargs["type"] = type(default)
    return kwargs


def add_library_config_args(
    parser, config_obj: Optional[aconfig.AttributeAccessDict] = None
) -> ConfigSetters:
    """Add a --<dotted.key> flag for each value in the library config"""
    setters = {}
    known_flags = parser._option_string_actions  # pylint: disable=protected-access
    for dotted_key, default in _config_leaves(config_obj or library_config):
        flag = f"--{dotted_key}"
        if flag in known_flags:
            continue
        kwargs = _arg_kwargs(dotted_key, default)
        parser.add_argument(flag, **kwargs)
        setters[kwargs["dest"]] = dotted_key
    return setters


def update_library_config(args, setters: ConfigSetters):
    """Write the parsed flag values back into the library config"""
    for dest_name, dotted_key in setters.items():
        nested_set(library_config, dotted_key, getattr(args, dest_name))


def add_command(
    subparsers: argparse._SubParsersAction,
    cmd: CmdBase,
) -> Tuple[argparse.ArgumentParser, ConfigSetters]:
    """Register the command's subparser with its library config flags"""
    parser = cmd.add_subparser(subparsers)
    parser.set_defaults(func=cmd.cmd)
    config_group = parser.add_argument_group("Library Configuration")
    return parser, add_library_config_args(config_group)


## Main ########################################################################


def main():
    """The main module provides the executable entrypoint for pkgop"""
    parser = argparse.ArgumentParser(description=__doc__)
    subparsers = parser.add_subparsers(help="Available commands", dest="command")
    command_parsers = {}
    for cmd in [BootstrapCmd(), RunManagerCmd()]:
        cmd_parser, setters = add_command(subparsers, cmd)
        command_parsers[cmd_parser.prog.split()[-1]] = (cmd_parser, setters)

    # Without a known command name as the first positional, parse the whole
    # command line as the default command
    peek_parser = argparse.ArgumentParser(add_help=False)
    peek_parser.add_argument("command", nargs="?")
    peeked, _ = peek_parser.parse_known_args()
    command = (
        peeked.command if peeked.command in subparsers.choices else DEFAULT_COMMAND
    )
    cmd_parser, setters = command_parsers[command]
    if command == peeked.command:
        args = parser.parse_args()
    else:
        args = cmd_parser.parse_args()
    update_library_config(args, setters)

    # Logging was first configured at import time from the unflagged config
    alog.configure(
        default_level=config.log_level,
        filters=config.log_filters,
        formatter=(
            PkgOpJsonFormatter(bootstrap_image=config.self_bootstrap_image)
            if config.log_json
            else "pretty"
        ),
        thread_id=config.log_thread_id,
    )
    log.debug("Running command [%s]", command)
    args.func(args)


if __name__ == "__main__":  # pragma: no cover
    main()
