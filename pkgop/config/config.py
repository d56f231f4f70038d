"""
Import-time load of the library config, its validation and the first logging
setup. Flags given on the command line are applied later by __main__.
"""

# Standard
import os

# First Party
import aconfig
import alog

# Local
from ..exceptions import assert_config
from .validation import get_invalid_params

_CONFIG_DIR = os.path.dirname(__file__)


def _load_yaml(file_name: str, env_overrides: bool) -> aconfig.Config:
    return aconfig.Config.from_yaml(
        os.path.join(_CONFIG_DIR, file_name),
        override_env_vars=env_overrides,
    )


# Values may be overridden with env vars (e.g. BOOTSTRAP_CHECK_INTERVAL)
library_config = _load_yaml("config.yaml", env_overrides=True)

# The parameter types are fixed
validation_config = _load_yaml("config_validation.yaml", env_overrides=False)

invalid_params = get_invalid_params(library_config, validation_config)
assert_config(
    not invalid_params,
    f"Invalid library config values for: {', '.join(invalid_params)}",
)

alog.configure(
    default_level=library_config.log_level,
    filters=library_config.log_filters,
    formatter="json" if library_config.log_json else "pretty",
    thread_id=library_config.log_thread_id,
)
