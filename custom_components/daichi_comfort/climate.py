"""Climate platform for Daichi Comfort integration."""
import logging
from typing import Any

from homeassistant.components.climate import (
    DEFAULT_MAX_TEMP,
    DEFAULT_MIN_TEMP,
    SWING_OFF,
    SWING_ON,
    ClimateEntity,
    ClimateEntityFeature,
    HVACAction,
    HVACMode,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import ATTR_TEMPERATURE, UnitOfTemperature
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .constants import DOMAIN, ControlMode
from .coordinator import DaichiDeviceCoordinator
from .entity_base import DaichiBaseEntity
from .projection import Characteristic

_LOGGER = logging.getLogger(__name__)

# HVAC mode -> function selecting it on the device
HVAC_MODE_CONTROLS = {
    HVACMode.AUTO: ControlMode.AUTO_MODE,
    HVACMode.HEAT: ControlMode.HEAT_MODE,
    HVACMode.COOL: ControlMode.COOL_MODE,
}


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Daichi climate entities."""
    coordinators = hass.data[DOMAIN][config_entry.entry_id]["coordinators"]
    async_add_entities(DaichiClimate(coordinator) for coordinator in coordinators)


class DaichiClimate(DaichiBaseEntity, CoordinatorEntity[DaichiDeviceCoordinator], ClimateEntity):
    """Daichi air conditioner."""

    def __init__(self, coordinator: DaichiDeviceCoordinator):
        """Initialize the climate entity."""
        super().__init__(coordinator)
        device = coordinator.device

        self._attr_unique_id = f"{device.serial or device.device_id}_climate"
        self._attr_name = None  # Use device name
        self._attr_has_entity_name = True

        self._attr_temperature_unit = UnitOfTemperature.CELSIUS
        self._attr_target_temperature_step = 1
        if device.temperature_range:
            self._attr_min_temp, self._attr_max_temp = device.temperature_range
        else:
            self._attr_min_temp, self._attr_max_temp = DEFAULT_MIN_TEMP, DEFAULT_MAX_TEMP

        features = ClimateEntityFeature(0)
        if device.supports(ControlMode.IS_ON):
            features |= ClimateEntityFeature.TURN_ON | ClimateEntityFeature.TURN_OFF
        if device.supports(ControlMode.SET_TEMP):
            features |= ClimateEntityFeature.TARGET_TEMPERATURE
        if device.supports(ControlMode.FAN_FLOW):
            features |= ClimateEntityFeature.SWING_MODE
            self._attr_swing_modes = [SWING_ON, SWING_OFF]
        self._attr_supported_features = features

        hvac_modes = [HVACMode.OFF] if device.supports(ControlMode.IS_ON) else []
        self._attr_hvac_modes = hvac_modes + [
            hvac_mode
            for hvac_mode, mode in HVAC_MODE_CONTROLS.items()
            if device.supports(mode)
        ]

    @property
    def current_temperature(self) -> float | None:
        value = self._value(Characteristic.CURRENT_TEMPERATURE)
        _LOGGER.debug("Triggered GET CurrentTemperature: %s", value)
        return value

    @property
    def target_temperature(self) -> float | None:
        return self._value(Characteristic.COOLING_THRESHOLD_TEMPERATURE)

    @property
    def hvac_mode(self) -> HVACMode:
        """Return OFF while inactive, the device operating mode otherwise."""
        if not self._value(Characteristic.ACTIVE):
            return HVACMode.OFF
        return self._value(Characteristic.TARGET_HEATER_COOLER_STATE)

    @property
    def hvac_action(self) -> HVACAction:
        return self._value(Characteristic.CURRENT_HEATER_COOLER_STATE)

    @property
    def swing_mode(self) -> str | None:
        if not self._device.supports(ControlMode.FAN_FLOW):
            return None
        return self._value(Characteristic.SWING_MODE)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose both thresholds, backed by the single device setpoint."""
        return {
            "cooling_threshold_temperature": self._value(
                Characteristic.COOLING_THRESHOLD_TEMPERATURE
            ),
            "heating_threshold_temperature": self._value(
                Characteristic.HEATING_THRESHOLD_TEMPERATURE
            ),
            "online": self._device.state.online,
        }

    async def async_turn_on(self) -> None:
        await self._async_control(ControlMode.IS_ON, True)

    async def async_turn_off(self) -> None:
        await self._async_control(ControlMode.IS_ON, False)

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        """Switch the operating mode, powering the unit on or off as needed."""
        if hvac_mode == HVACMode.OFF:
            await self._async_control(ControlMode.IS_ON, False)
            return

        mode = HVAC_MODE_CONTROLS.get(hvac_mode)
        if mode is None:
            _LOGGER.error("Unsupported HVAC mode: %s", hvac_mode)
            return

        if not self._device.state.power_state:
            await self._async_control(ControlMode.IS_ON, True)
        await self._async_control(mode, True)

    async def async_set_temperature(self, **kwargs: Any) -> None:
        temperature = kwargs.get(ATTR_TEMPERATURE)
        if temperature is None:
            _LOGGER.warning("No temperature provided in kwargs")
            return
        if self._device.state.set_temp != temperature:
            await self._async_control(ControlMode.SET_TEMP, temperature)

    async def async_set_swing_mode(self, swing_mode: str) -> None:
        await self._async_control(ControlMode.FAN_FLOW, swing_mode == SWING_ON)
