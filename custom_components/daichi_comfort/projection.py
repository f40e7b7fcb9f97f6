"""Projection of the device shadow onto entity-visible values.

Every projection is a pure function of shadow fields. The change detector
compares two projections and keeps only the values that really changed, so
listeners are not woken up for redundant updates.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from homeassistant.components.climate import SWING_OFF, SWING_ON, HVACAction, HVACMode

from .constants import MODE_COOL, MODE_HEAT
from .device_state import DeviceState


class Characteristic(StrEnum):
    """Externally visible values of an air conditioner."""

    ACTIVE = "active"
    CURRENT_TEMPERATURE = "current_temperature"
    CURRENT_HEATER_COOLER_STATE = "current_heater_cooler_state"
    TARGET_HEATER_COOLER_STATE = "target_heater_cooler_state"
    COOLING_THRESHOLD_TEMPERATURE = "cooling_threshold_temperature"
    HEATING_THRESHOLD_TEMPERATURE = "heating_threshold_temperature"
    SWING_MODE = "swing_mode"
    ROTATION_SPEED = "rotation_speed"


def project_active(power_state: bool, online: bool | None) -> bool:
    return bool(power_state and online)


def project_current_temperature(cur_temp: float) -> float:
    return cur_temp


def project_current_heater_cooler_state(
    power_state: bool,
    online: bool | None,
    cur_temp: float,
    set_temp: float,
    mode: str | None,
) -> HVACAction:
    """Return what the unit is doing right now.

    An explicit heat or cool mode wins; in any other mode the action is
    inferred from the room temperature relative to the setpoint.
    """
    if not power_state or not online:
        return HVACAction.OFF
    if mode == MODE_HEAT:
        return HVACAction.HEATING
    if mode == MODE_COOL:
        return HVACAction.COOLING
    if cur_temp > set_temp:
        return HVACAction.COOLING
    if cur_temp < set_temp:
        return HVACAction.HEATING
    return HVACAction.IDLE


def project_target_heater_cooler_state(mode: str | None) -> HVACMode:
    if mode == MODE_COOL:
        return HVACMode.COOL
    if mode == MODE_HEAT:
        return HVACMode.HEAT
    return HVACMode.AUTO


def project_threshold_temperature(set_temp: float) -> float:
    # Cooling and heating thresholds share the single device setpoint
    return set_temp


def project_swing_mode(swing_mode: bool) -> str:
    return SWING_ON if swing_mode else SWING_OFF


def project_rotation_speed(
    auto_fan_speed_is_on: bool, fan_speed: float, fan_speed_min_step: int
) -> float:
    """Return the fan speed as a percentage, 0 meaning automatic."""
    return 0 if auto_fan_speed_is_on else fan_speed * fan_speed_min_step


def project_state(state: DeviceState, fan_speed_min_step: int) -> dict[Characteristic, Any]:
    """Project every characteristic from ``state``."""
    return {
        Characteristic.ACTIVE: project_active(state.power_state, state.online),
        Characteristic.CURRENT_TEMPERATURE: project_current_temperature(state.cur_temp),
        Characteristic.CURRENT_HEATER_COOLER_STATE: project_current_heater_cooler_state(
            state.power_state, state.online, state.cur_temp, state.set_temp, state.mode
        ),
        Characteristic.TARGET_HEATER_COOLER_STATE: project_target_heater_cooler_state(
            state.mode
        ),
        Characteristic.COOLING_THRESHOLD_TEMPERATURE: project_threshold_temperature(
            state.set_temp
        ),
        Characteristic.HEATING_THRESHOLD_TEMPERATURE: project_threshold_temperature(
            state.set_temp
        ),
        Characteristic.SWING_MODE: project_swing_mode(state.swing_mode),
        Characteristic.ROTATION_SPEED: project_rotation_speed(
            state.auto_fan_speed_is_on, state.fan_speed, fan_speed_min_step
        ),
    }


def check_and_update(old_value: Any, new_value: Any) -> bool:
    """Return True if ``new_value`` must be published."""
    return new_value is not None and new_value != old_value


def detect_changes(
    old_values: dict[Characteristic, Any], new_values: dict[Characteristic, Any]
) -> dict[Characteristic, Any]:
    """Return the characteristics whose projected value changed."""
    return {
        characteristic: value
        for characteristic, value in new_values.items()
        if check_and_update(old_values.get(characteristic), value)
    }
