"""
Module to validate values in a loaded config against a parallel validation file
"""

# Standard
from typing import Any, Callable, Dict, List, Optional, Type
import abc

# First Party
import aconfig
import alog

# Local
from .. import constants
from ..utils import nested_get, parse_time_delta

log = alog.use_channel("CONFG")


## Public ######################################################################


def get_invalid_params(
    config: aconfig.Config,
    validation_config: aconfig.Config,
) -> List[str]:
    """Get a list of any params that are invalid

    Args:
        config:  aconfig.Config
            The parsed config with any override values
        validation_config:  aconfig.Config
            The parallel config holding validation setup

    Returns:
        invalid_params:  List[str]
            A list of all string keys for parameters that fail validation
    """
    invalid_params = []
    for key, param in parse_validation_config(validation_config).items():
        if not param.validate(nested_get(config, key)):
            log.warning("Found invalid config key [%s]", key)
            invalid_params.append(key)
    return invalid_params


def parse_validation_config(
    validation_config: dict,
    prefix: Optional[List[str]] = None,
) -> Dict[str, "Parameter"]:
    """Recursively walk a validation config and build the flat mapping from
    nested key to Parameter. Any dict with a known "type" is a parameter, all
    other dicts are recursed into.
    """
    prefix = prefix or []
    params = {}
    for key, val in validation_config.items():
        assert isinstance(key, str), "Only string keys allowed!"
        if not isinstance(val, dict):
            continue
        key_parts = prefix + [key]
        nested_key = constants.NESTED_DICT_DELIM.join(key_parts)
        param_type = _PARAMETER_TYPES.get(val.get("type"))
        if param_type is not None:
            log.debug3("Found %s parameter at [%s]", param_type.__name__, nested_key)
            kwargs = {k: v for k, v in val.items() if k != "type"}
            params[nested_key] = param_type(**kwargs)
        else:
            log.debug3("Recursing into [%s]", nested_key)
            params.update(parse_validation_config(val, key_parts))
    return params


## Parameters ##################################################################

# Global registry from "type" keys to the Parameter class that handles them
_PARAMETER_TYPES: Dict[str, Type["Parameter"]] = {}


def _parameter_type(type_key: str) -> Callable:
    """Decorator to register a Parameter class under a type key"""

    def decorator(cls):
        cls.TYPE_KEY = type_key
        _PARAMETER_TYPES[type_key] = cls
        return cls

    return decorator


class Parameter(abc.ABC):
    """A Parameter validates the type and value of a single config entry"""

    TYPE_KEY = None
    VALID_TYPES = ()

    def __init__(self, optional: bool = False):
        self.optional = optional

    def validate(self, value: Any) -> bool:
        """Run the validation for a read value

        Args:
            value:  Any
                The value to validate against this parameter

        Returns:
            valid:  bool
                True if the value is valid, False otherwise
        """
        if value is None:
            return self.optional

        # NOTE: bool is a subclass of int, so it must be excluded explicitly
        #   for the numeric types
        if not isinstance(value, self.VALID_TYPES) or (
            isinstance(value, bool) and bool not in self.VALID_TYPES
        ):
            log.warning("Invalid type <%s> for %s", type(value), self.TYPE_KEY)
            return False

        if not self._validate_value(value):
            log.warning("Invalid value [%s] for %s", value, self.TYPE_KEY)
            return False
        return True

    @abc.abstractmethod
    def _validate_value(self, value: Any) -> bool:
        """Type-specific value validation"""


# pylint: disable=too-few-public-methods,redefined-builtin


@_parameter_type("number")
class NumberParameter(Parameter):
    """A number with optional inclusive bounds"""

    VALID_TYPES = (int, float)

    def __init__(self, min=None, max=None, **kwargs):
        super().__init__(**kwargs)
        self.min = min
        self.max = max

    def _validate_value(self, value) -> bool:
        return (self.min is None or value >= self.min) and (
            self.max is None or value <= self.max
        )


@_parameter_type("int")
class IntParameter(NumberParameter):
    """An int with optional inclusive bounds"""

    VALID_TYPES = (int,)


@_parameter_type("float")
class FloatParameter(NumberParameter):
    """A float with optional inclusive bounds"""

    VALID_TYPES = (float,)


@_parameter_type("bool")
class BoolParameter(Parameter):
    """Any bool value"""

    VALID_TYPES = (bool,)

    def _validate_value(self, value) -> bool:
        return True


@_parameter_type("str")
class StrParameter(Parameter):
    """A string with optional inclusive length bounds"""

    VALID_TYPES = (str,)

    def __init__(self, min_len=None, max_len=None, **kwargs):
        super().__init__(**kwargs)
        self.min_len = min_len
        self.max_len = max_len

    def _validate_value(self, value) -> bool:
        return (self.min_len is None or len(value) >= self.min_len) and (
            self.max_len is None or len(value) <= self.max_len
        )


@_parameter_type("enum")
class EnumParameter(Parameter):
    """One of a fixed set of values"""

    VALID_TYPES = (str, int, bool)

    def __init__(self, values, **kwargs):
        super().__init__(**kwargs)
        assert isinstance(values, list) and values, "Must give at least one value"
        self.values = values

    def _validate_value(self, value) -> bool:
        return value in self.values


@_parameter_type("duration")
class DurationParameter(Parameter):
    """A string time delta parsable by parse_time_delta (e.g. 2s, 1m30s)"""

    VALID_TYPES = (str,)

    def __init__(self, allow_empty: bool = False, **kwargs):
        super().__init__(**kwargs)
        self.allow_empty = allow_empty

    def _validate_value(self, value) -> bool:
        if not value:
            return self.allow_empty
        return parse_time_delta(value) is not None


# pylint: enable=too-few-public-methods,redefined-builtin
