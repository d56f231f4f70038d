"""
Common utilities shared across components in the library
"""

# Standard
from datetime import timedelta
from typing import Any, List, Optional
import re

# Local
from . import constants

# Sentinel for missing dict values
__MISSING__ = "__MISSING__"

## Dicts #######################################################################


def _split_key(key: str) -> List[str]:
    return key.split(constants.NESTED_DICT_DELIM)


def nested_set(dct: dict, key: str, val: Any):
    """Set a value in a nested dict using 'foo.bar' key notation. Missing
    intermediate dicts are created.

    Raises:
        TypeError: If an intermediate value exists but is not a dict
    """
    *parents, leaf = _split_key(key)
    for depth, part in enumerate(parents):
        dct = dct.setdefault(part, {})
        if not isinstance(dct, dict):
            prefix = constants.NESTED_DICT_DELIM.join(parents[: depth + 1])
            raise TypeError(f"Intermediate key {prefix} is not a dict")
    dct[leaf] = val


def nested_get(dct: dict, key: str, dflt=None) -> Any:
    """Get a value from a nested dict using 'foo.bar' key notation

    Returns:
        val:  Any
            The value at the key, or dflt if the key or any intermediate dict
            is missing

    Raises:
        TypeError: If an intermediate value exists but is not a dict
    """
    *parents, leaf = _split_key(key)
    for depth, part in enumerate(parents):
        dct = dct.get(part, __MISSING__)
        if dct is __MISSING__:
            return dflt
        if not isinstance(dct, dict):
            prefix = constants.NESTED_DICT_DELIM.join(parents[: depth + 1])
            raise TypeError(f"Intermediate key {prefix} is not a dict")
    return dct.get(leaf, dflt)


## Time ########################################################################

# Durations like 1hr, 5m, 10s, 1m30s or 0.5s
_DURATION_REGEX = re.compile(
    r"^(?:(?P<hours>\d+)hr)?(?:(?P<minutes>\d+)m)?(?:(?P<seconds>\d*\.?\d+)s)?$"
)


def parse_time_delta(time_str: Optional[str]) -> Optional[timedelta]:
    """Parse a duration string into a timedelta

    Args:
        time_str:  Optional[str]
            A duration such as 1hr, 5m, 10s, 1m30s or 0.5s

    Returns:
        delta:  Optional[timedelta]
            The parsed duration, or None if the string is empty or invalid
    """
    match = _DURATION_REGEX.match(time_str or "")
    if not time_str or not match:
        return None
    parts = {name: float(val) for name, val in match.groupdict().items() if val}
    return timedelta(**parts)
