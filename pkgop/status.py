"""
This module holds the common functionality used to read and write the status
conditions of package resources.

Packages report the following conditions that matter during bootstrap:

* package-operator.run/Unpacked: True once the package contents have been
    fetched, rendered and validated
* Available: True once all of the runtime objects of the package are healthy

A condition follows the standard kubernetes schema:
{
    "type": "Available",
    "status": "True" | "False" | "Unknown",
    "reason": "...",
    "message": "...",
    "lastTransitionTime": "...",
    "observedGeneration": N,
}
"""

# Standard
from datetime import datetime, timezone
from typing import List, Optional
import copy

# First Party
import alog

log = alog.use_channel("STTUS")

## Public ######################################################################

# The key in the condition used for the timestamp
TIMESTAMP_KEY = "lastTransitionTime"

# The string values used for the condition status
CONDITION_TRUE = "True"
CONDITION_FALSE = "False"
CONDITION_UNKNOWN = "Unknown"


def get_conditions(resource: Optional[dict]) -> List[dict]:
    """Get the list of status conditions from a resource manifest

    Args:
        resource:  Optional[dict]
            The full resource manifest

    Returns:
        conditions:  List[dict]
            The conditions on the resource or an empty list
    """
    return ((resource or {}).get("status") or {}).get("conditions") or []


def get_condition(type_name: str, conditions: List[dict]) -> dict:
    """Extract the given condition type from a list of conditions

    Args:
        type_name:  str
            The condition type to fetch
        conditions:  List[dict]
            The conditions from a resource status

    Returns:
        condition:  dict
            The condition object if found, empty dict otherwise
    """
    cond = [cond for cond in conditions if cond.get("type") == type_name]
    if cond:
        assert len(cond) == 1, f"Found multiple condition entries for {type_name}"
        return cond[0]
    return {}


def is_condition_true(type_name: str, conditions: List[dict]) -> bool:
    """Determine whether the given condition is present and has status True"""
    return get_condition(type_name, conditions).get("status") == CONDITION_TRUE


def is_resource_condition_true(type_name: str, resource: Optional[dict]) -> bool:
    """Shortcut to check a condition directly on a resource manifest"""
    return is_condition_true(type_name, get_conditions(resource))


def make_condition(
    type_name: str,
    status: bool,
    reason: str,
    message: str = "",
    observed_generation: Optional[int] = None,
    last_transition_time: Optional[datetime] = None,
) -> dict:
    """Build the dict representation of a condition"""
    last_transition_time = last_transition_time or datetime.now(timezone.utc)
    condition = {
        "type": type_name,
        "status": CONDITION_TRUE if status else CONDITION_FALSE,
        "reason": reason,
        "message": message,
        TIMESTAMP_KEY: last_transition_time.strftime("%Y-%m-%dT%H:%M:%SZ"),
    }
    if observed_generation is not None:
        condition["observedGeneration"] = observed_generation
    return condition


def set_condition(conditions: List[dict], new_condition: dict) -> List[dict]:
    """Set a condition in a list of conditions, returning the updated copy. The
    transition time of an existing condition is kept when its status does not
    change.

    Args:
        conditions:  List[dict]
            The current list of conditions
        new_condition:  dict
            The condition to set

    Returns:
        updated_conditions:  List[dict]
            The new list with the condition replaced or appended
    """
    updated = copy.deepcopy(conditions)
    for i, cond in enumerate(updated):
        if cond.get("type") != new_condition["type"]:
            continue
        merged = copy.deepcopy(new_condition)
        if cond.get("status") == new_condition.get("status"):
            log.debug3("No transition for condition %s", new_condition["type"])
            merged[TIMESTAMP_KEY] = cond.get(TIMESTAMP_KEY, merged[TIMESTAMP_KEY])
        updated[i] = merged
        return updated
    updated.append(copy.deepcopy(new_condition))
    return updated
