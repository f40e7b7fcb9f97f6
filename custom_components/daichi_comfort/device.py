"""Per-device core of the Daichi Comfort integration.

A :class:`DaichiDevice` owns the shadow state, the resolved functions and
the cached projection of one air conditioner. Command responses and push
messages both end up in :meth:`DaichiDevice.apply_device`, which
re-derives the shadow, re-projects it and notifies listeners with the
values that changed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from .constants import DEFAULT_CONTROL_RETRIES, DEFAULT_MANUFACTURER, DEFAULT_NAME, ControlMode
from .device_state import DeviceState, derive_device_state
from .functions import fan_speed_max, fan_speed_min_step, resolve_functions, temperature_range
from .models import Device, DeviceList, PultFunction
from .projection import Characteristic, detect_changes, project_state

if TYPE_CHECKING:
    from .daichi_api import DaichiAPI

_LOGGER = logging.getLogger(__name__)

ChangeListener = Callable[[dict[Characteristic, Any]], None]


class DaichiDevice:
    """Shadow and command path of one physical air conditioner."""

    def __init__(self, api: DaichiAPI, device: Device) -> None:
        self._api = api
        self._listeners: list[ChangeListener] = []

        self.device_id = device.id
        self.serial = device.serial
        self.name = device.title or DEFAULT_NAME
        self.manufacturer = (
            device.device_info.brand if device.device_info and device.device_info.brand else DEFAULT_MANUFACTURER
        )
        self.model = device.hardware_model

        # Function ids, ranges and the fan step are fixed for the lifetime
        # of the device so that reported percentages never shift.
        self.functions: dict[ControlMode, PultFunction] = resolve_functions(device) or {}
        self.fan_speed_max = int(fan_speed_max(self.functions))
        self.fan_speed_min_step = fan_speed_min_step(self.functions)
        self.temperature_range = temperature_range(self.functions)

        self.state = DeviceState()
        derive_device_state(self.state, device)
        self.values = project_state(self.state, self.fan_speed_min_step)

    def supports(self, mode: ControlMode) -> bool:
        """Return True if the device exposes a function for ``mode``."""
        return mode in self.functions

    def add_listener(self, listener: ChangeListener) -> Callable[[], None]:
        """Register ``listener`` for changed values; return an unsubscribe callable."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def apply_device(self, device: Device | None, *, notify: bool = True) -> dict[Characteristic, Any]:
        """Re-derive the shadow from ``device`` and return the changed values."""
        if device is None:
            return {}

        old_values = self.values
        derive_device_state(self.state, device)
        self.values = project_state(self.state, self.fan_speed_min_step)
        changes = detect_changes(old_values, self.values)

        if changes:
            _LOGGER.debug("Device %s changed: %s", self.device_id, changes)
            if notify:
                for listener in list(self._listeners):
                    listener(changes)
        return changes

    async def async_send_command(self, mode: ControlMode, value: bool | float | None) -> bool:
        """Send ``value`` for ``mode`` and apply the refreshed device state.

        Returns:
            True if the cloud accepted the command, False otherwise. A mode
            without a function is silently ignored.
        """
        function = self.functions.get(mode)
        if function is None:
            _LOGGER.debug("Device %s has no function for %s", self.device_id, mode.name)
            return False

        command_parameters = (
            f"Command parameters: cmd = {mode.name}, val = {value}, "
            f"functionId = {function.id}, deviceId = {self.device_id}"
        )
        _LOGGER.debug(command_parameters)

        result = await self._api.async_control_device(
            self.device_id, mode, function.id, value, DEFAULT_CONTROL_RETRIES
        )
        if result is None:
            _LOGGER.error(command_parameters)
            return False

        self.apply_device(result.find_device(self.device_id))
        return True

    def handle_push_message(self, payload: bytes | str) -> None:
        """Apply a push notification carrying a device list."""
        raw = payload.decode("utf-8", errors="replace") if isinstance(payload, bytes | bytearray) else payload
        try:
            device = DeviceList.model_validate_json(raw or "{}").find(self.device_id)
        except ValidationError:
            device = None

        if device is None:
            _LOGGER.error("MQTT sent incorrect message: %s", raw)
            return
        self.apply_device(device)
