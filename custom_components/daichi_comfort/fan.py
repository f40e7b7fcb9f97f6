import logging
import math

from homeassistant.components.fan import FanEntity, FanEntityFeature
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .constants import DOMAIN, FAN_PRESET_AUTO, ControlMode
from .coordinator import DaichiDeviceCoordinator
from .entity_base import DaichiBaseEntity
from .projection import Characteristic

_LOGGER = logging.getLogger(__name__)


def percentage_to_fan_speed(percentage: int, step: int, max_speed: int) -> int:
    """Convert a percentage to raw vendor fan speed units.

    The result is quantized down to the step so that the percentage read
    back is never above the one requested, and capped at max_speed. A
    percentage below one step gives 0, which selects automatic speed.
    """
    return max(0, min(math.floor(percentage / step), max_speed))


class DaichiFan(DaichiBaseEntity, CoordinatorEntity[DaichiDeviceCoordinator], FanEntity):
    """Fan speed of a Daichi air conditioner, below one step selecting automatic speed."""

    def __init__(self, coordinator: DaichiDeviceCoordinator):
        super().__init__(coordinator)
        device = coordinator.device

        self._attr_has_entity_name = True
        self._attr_translation_key = "fan_speed"
        self._attr_unique_id = f"{device.serial or device.device_id}_fan_speed"

        self._attr_speed_count = device.fan_speed_max

        features = FanEntityFeature(0)
        if device.supports(ControlMode.IS_ON):
            features |= FanEntityFeature.TURN_ON | FanEntityFeature.TURN_OFF
        if device.supports(ControlMode.FAN_SPEED):
            features |= FanEntityFeature.SET_SPEED
        if device.supports(ControlMode.FAN_SPEED_AUTO):
            features |= FanEntityFeature.PRESET_MODE
            self._attr_preset_modes = [FAN_PRESET_AUTO]
        self._attr_supported_features = features

    @property
    def is_on(self) -> bool:
        return bool(self._value(Characteristic.ACTIVE))

    @property
    def percentage(self) -> int | None:
        value = self._value(Characteristic.ROTATION_SPEED)
        _LOGGER.debug("Triggered GET RotationSpeed: %s", value)
        return None if value is None else int(value)

    @property
    def preset_mode(self) -> str | None:
        if self._device.state.auto_fan_speed_is_on:
            return FAN_PRESET_AUTO
        return None

    async def async_set_percentage(self, percentage: int) -> None:
        """Set the fan speed; anything below one step switches to automatic speed."""
        fan_speed = percentage_to_fan_speed(
            percentage, self._device.fan_speed_min_step, self._device.fan_speed_max
        )
        if fan_speed == 0:
            await self._async_control(ControlMode.FAN_SPEED_AUTO, True)
            return

        state = self._device.state
        if state.auto_fan_speed_is_on or state.fan_speed != fan_speed:
            await self._async_control(ControlMode.FAN_SPEED, fan_speed)

    async def async_set_preset_mode(self, preset_mode: str) -> None:
        if preset_mode != FAN_PRESET_AUTO:
            _LOGGER.error("Unknown preset mode: %s", preset_mode)
            return
        await self._async_control(ControlMode.FAN_SPEED_AUTO, True)

    async def async_turn_on(self, percentage=None, preset_mode=None, **kwargs) -> None:
        await self._async_control(ControlMode.IS_ON, True)
        if preset_mode is not None:
            await self.async_set_preset_mode(preset_mode)
        elif percentage is not None:
            await self.async_set_percentage(percentage)

    async def async_turn_off(self, **kwargs) -> None:
        await self._async_control(ControlMode.IS_ON, False)


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
):
    coordinators = hass.data[DOMAIN][entry.entry_id]["coordinators"]
    entities = [
        DaichiFan(coordinator)
        for coordinator in coordinators
        if coordinator.device.supports(ControlMode.FAN_SPEED)
        or coordinator.device.supports(ControlMode.FAN_SPEED_AUTO)
    ]
    async_add_entities(entities)
