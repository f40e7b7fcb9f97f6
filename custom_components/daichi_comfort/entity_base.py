"""Base entity mixin for all Daichi Comfort entities.

Provides device registry info, access to projected values and the
command path shared by the climate and fan entities.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.device_registry import DeviceInfo

from .constants import DOMAIN, ControlMode

if TYPE_CHECKING:
    from .coordinator import DaichiDeviceCoordinator
    from .device import DaichiDevice
    from .projection import Characteristic

_LOGGER = logging.getLogger(__name__)


class DaichiBaseEntity:
    """Mixin providing common functionality for all Daichi entities.

    Typical usage::

        class MyEntity(DaichiBaseEntity, CoordinatorEntity, ClimateEntity):
            ...
    """

    coordinator: DaichiDeviceCoordinator

    @property
    def _device(self) -> DaichiDevice:
        return self.coordinator.device

    @property
    def device_info(self) -> DeviceInfo:
        """Return device information for the entity registry."""
        device = self._device
        return DeviceInfo(
            identifiers={(DOMAIN, device.serial or str(device.device_id))},
            name=device.name,
            manufacturer=device.manufacturer,
            model=device.model or None,
            serial_number=device.serial,
        )

    def _value(self, characteristic: Characteristic) -> Any:
        """Return the cached projected value of ``characteristic``."""
        return self._device.values.get(characteristic)

    async def _async_control(self, mode: ControlMode, value: Any) -> None:
        """Send a command; failures are logged and leave the state untouched."""
        _LOGGER.debug("Triggered SET %s: %s", mode.name, value)
        await self.coordinator.async_send_command(mode, value)
