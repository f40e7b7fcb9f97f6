"""In-memory shadow of an air conditioner's logical state."""

from __future__ import annotations

from dataclasses import dataclass

from .constants import OPERATING_MODES, STATUS_CONNECTED, ControlMode
from .functions import resolve_functions
from .models import Device, PultFunction


@dataclass
class DeviceState:
    """Logical state derived from the latest known device payload.

    ``online`` is None when the last payload carried no status at all.
    ``fan_speed`` is in raw vendor units.
    """

    online: bool | None = False
    power_state: bool = False
    cur_temp: float = 0
    set_temp: float = 0
    fan_speed: float = 0
    auto_fan_speed_is_on: bool = False
    mode: str | None = None
    swing_mode: bool = False


def _value(functions: dict[ControlMode, PultFunction], mode: ControlMode):
    function = functions.get(mode)
    return function.value if function else None


def _is_on(functions: dict[ControlMode, PultFunction], mode: ControlMode):
    function = functions.get(mode)
    return function.is_on if function else None


def derive_device_state(
    state: DeviceState,
    device: Device | None,
    functions: dict[ControlMode, PultFunction] | None = None,
) -> None:
    """Re-derive ``state`` in place from a fresh ``device`` payload.

    Every field is recomputed from the payload and keeps its previous value
    only when the payload does not carry it. When ``functions`` is not given
    it is resolved from ``device`` itself, so function values always come
    from the payload being applied.
    """
    if device is None:
        return

    if functions is None:
        functions = resolve_functions(device)

    if device.cur_temp is not None:
        state.cur_temp = device.cur_temp
    if device.state is not None and device.state.is_on is not None:
        state.power_state = device.state.is_on
    # An absent status clears online to None instead of keeping it.
    state.online = (
        device.status == STATUS_CONNECTED if device.status is not None else device.status
    )

    if not functions:
        return

    set_temp = _value(functions, ControlMode.SET_TEMP)
    if set_temp is not None:
        state.set_temp = set_temp

    fan_speed = _value(functions, ControlMode.FAN_SPEED)
    if fan_speed is not None:
        state.fan_speed = fan_speed

    auto_fan_speed = _is_on(functions, ControlMode.FAN_SPEED_AUTO)
    if auto_fan_speed is not None:
        state.auto_fan_speed_is_on = auto_fan_speed

    active_mode = next(
        (
            functions[mode]
            for mode in OPERATING_MODES
            if mode in functions and functions[mode].is_on is True
        ),
        None,
    )
    if active_mode is not None and active_mode.on_command is not None:
        state.mode = active_mode.on_command

    swing_mode = _is_on(functions, ControlMode.FAN_FLOW)
    if swing_mode is not None:
        state.swing_mode = swing_mode
