import logging
from typing import Any

from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .device import DaichiDevice
from .projection import Characteristic

_LOGGER = logging.getLogger(__name__)


class DaichiDeviceCoordinator(DataUpdateCoordinator[dict[Characteristic, Any]]):
    """Push-driven coordinator for one air conditioner.

    There is no polling interval: data changes when a command response or
    an MQTT message is applied to the device, and listeners are only
    updated when a projected value actually changed. A manual refresh
    re-fetches the device over REST.
    """

    def __init__(self, hass, entry, api, device: DaichiDevice):
        super().__init__(
            hass,
            _LOGGER,
            config_entry=entry,
            name=f"Daichi {device.name}",
            update_interval=None,
        )
        self.api = api
        self.device = device
        self.data = device.values
        self._unsub_device = device.add_listener(self._handle_device_changes)

    def _handle_device_changes(self, changes: dict[Characteristic, Any]) -> None:
        self.async_set_updated_data(self.device.values)

    async def _async_update_data(self):
        device = await self.api.async_get_device(self.device.device_id)
        if device is None:
            raise UpdateFailed(f"Device {self.device.device_id} could not be fetched")
        self.device.apply_device(device, notify=False)
        return self.device.values

    async def async_send_command(self, mode, value) -> bool:
        return await self.device.async_send_command(mode, value)

    def handle_push_message(self, topic: str, payload: bytes) -> None:
        _LOGGER.debug("MQTT message on %s for device %s", topic, self.device.device_id)
        self.device.handle_push_message(payload)

    async def async_shutdown(self) -> None:
        self._unsub_device()
        await super().async_shutdown()
