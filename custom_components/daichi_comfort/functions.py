"""Resolution of vendor pult functions to logical control modes.

The cloud identifies a function by its BLE tag, its title and its
on-command, never by a stable id per capability. Each control mode is
therefore found by matching that triple against the flattened list of a
device's functions.
"""

from __future__ import annotations

from typing import NamedTuple

from .constants import DEFAULT_FAN_SPEED_RANGE, ControlMode
from .models import Device, PultFunction


class FunctionMatcher(NamedTuple):
    """Lookup key of a control mode: tag plus optional title and on-command."""

    tag: str
    title: str | None = None
    on_command: str | None = None


FUNCTION_MATCHERS: dict[ControlMode, FunctionMatcher] = {
    ControlMode.IS_ON: FunctionMatcher("power"),
    ControlMode.SET_TEMP: FunctionMatcher("setTemp"),
    ControlMode.FAN_FLOW: FunctionMatcher("flow", "Vertical swing", "vert_on"),
    ControlMode.FAN_SPEED_AUTO: FunctionMatcher("fanSpeed", "Auto", "0"),
    ControlMode.FAN_SPEED: FunctionMatcher("fanSpeed", "Fan speed"),
    ControlMode.AUTO_MODE: FunctionMatcher("mode", on_command="auto"),
    ControlMode.HEAT_MODE: FunctionMatcher("mode", "Heat", "heat"),
    ControlMode.COOL_MODE: FunctionMatcher("mode", "Cool", "cool"),
}


def flatten_functions(device: Device | None) -> list[PultFunction]:
    """Return all functions of ``device`` in pult order.

    A function with a linked function is immediately followed by the link.
    """
    if device is None or not device.pult:
        return []

    functions: list[PultFunction] = []
    for pult in device.pult:
        for function in pult.functions or []:
            functions.append(function)
            if function.linked_function is not None:
                functions.append(function.linked_function)
    return functions


def search_function(
    tag: str,
    functions: list[PultFunction],
    title: str | None = None,
    on_command: str | None = None,
) -> PultFunction | None:
    """Return the first function matching ``tag`` and the given constraints."""
    return next(
        (
            fn
            for fn in functions
            if (not title or fn.title == title)
            and (not on_command or fn.on_command == on_command)
            and fn.tag == tag
        ),
        None,
    )


def resolve_functions(device: Device | None) -> dict[ControlMode, PultFunction] | None:
    """Map every control mode of ``device`` to its pult function.

    Returns None when the device has no functions at all. Modes without a
    matching function are left out of the mapping.
    """
    functions = flatten_functions(device)
    if not functions:
        return None

    resolved: dict[ControlMode, PultFunction] = {}
    for mode, matcher in FUNCTION_MATCHERS.items():
        function = search_function(
            matcher.tag, functions, matcher.title, matcher.on_command
        )
        if function is not None:
            resolved[mode] = function
    return resolved


def fan_speed_max(functions: dict[ControlMode, PultFunction]) -> int | float:
    """Return the top of the FanSpeed function's value range in raw units."""
    function = functions.get(ControlMode.FAN_SPEED)
    value_range = (function.value_range if function else None) or DEFAULT_FAN_SPEED_RANGE
    top = max(value_range)
    if top <= 0:
        top = max(DEFAULT_FAN_SPEED_RANGE)
    return top


def fan_speed_min_step(functions: dict[ControlMode, PultFunction]) -> int:
    """Return the percentage covered by one raw fan speed unit.

    ``floor(100 / max(valueRange))`` of the FanSpeed function.
    """
    return max(1, int(100 // fan_speed_max(functions)))


def temperature_range(
    functions: dict[ControlMode, PultFunction],
) -> tuple[float, float] | None:
    """Return (min, max) of the SetTemp function's value range, if known."""
    function = functions.get(ControlMode.SET_TEMP)
    value_range = function.value_range if function else None
    if not value_range:
        return None
    return min(value_range), max(value_range)
