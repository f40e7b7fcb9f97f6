"""Data models for Daichi Comfort integration.

This module provides Pydantic models for the payloads of the Daichi cloud:
devices with their pult functions, control responses and push messages.
Unknown fields are ignored so that vendor additions do not break parsing.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


# Base model for all Daichi data models
class DaichiModel(BaseModel):
    """Base model for all Daichi data structures.

    Field names are snake_case, the camelCase vendor names are accepted
    through aliases.
    """

    model_config = {"populate_by_name": True, "extra": "ignore"}


class BleTagInfo(DaichiModel):
    """Category tag of a pult function.

    Attributes:
        ble_tag: Function category, e.g. "power", "setTemp", "mode".
        ble_on_command: Variant within the category, e.g. "heat" or "cool".
    """

    ble_tag: str | None = Field(default=None, alias="bleTag")
    ble_on_command: str | None = Field(default=None, alias="bleOnCommand")


class FunctionMetaData(DaichiModel):
    ble_tag_info: BleTagInfo | None = Field(default=None, alias="bleTagInfo")


class FunctionState(DaichiModel):
    """Current value of a pult function."""

    value: int | float | None = Field(default=None, description="Numeric value")
    is_on: bool | None = Field(default=None, alias="isOn")
    value_range: list[int | float] | None = Field(
        default=None, alias="valueRange", description="Allowed values, min and max"
    )


class PultFunction(DaichiModel):
    """A controllable function of a device.

    A function may carry a linked function of the same shape. The linked
    function is a sibling for every purpose of the integration.

    Example:
        >>> fn = PultFunction.model_validate({
        ...     "id": 3,
        ...     "title": "Cool",
        ...     "state": {"isOn": True},
        ...     "metaData": {"bleTagInfo": {"bleTag": "mode", "bleOnCommand": "cool"}},
        ... })
        >>> fn.tag, fn.on_command
        ('mode', 'cool')
    """

    id: int = Field(..., description="Vendor function id")
    title: str | None = Field(default=None)
    state: FunctionState | None = Field(default=None)
    meta_data: FunctionMetaData | None = Field(default=None, alias="metaData")
    linked_function: PultFunction | None = Field(default=None, alias="linkedFunction")

    @property
    def tag(self) -> str | None:
        """Return the BLE tag of the function."""
        if self.meta_data and self.meta_data.ble_tag_info:
            return self.meta_data.ble_tag_info.ble_tag
        return None

    @property
    def on_command(self) -> str | None:
        """Return the BLE on-command of the function."""
        if self.meta_data and self.meta_data.ble_tag_info:
            return self.meta_data.ble_tag_info.ble_on_command
        return None

    @property
    def value(self) -> int | float | None:
        return self.state.value if self.state else None

    @property
    def is_on(self) -> bool | None:
        return self.state.is_on if self.state else None

    @property
    def value_range(self) -> list[int | float] | None:
        return self.state.value_range if self.state else None


class Pult(DaichiModel):
    """Group of functions shown together on the vendor remote."""

    functions: list[PultFunction] | None = Field(default=None)


class DeviceHardwareInfo(DaichiModel):
    brand: str | None = Field(default=None)
    seria: str | None = Field(default=None, description="Product series")
    model: str | None = Field(default=None)


class DevicePowerState(DaichiModel):
    is_on: bool | None = Field(default=None, alias="isOn")


class Device(DaichiModel):
    """Snapshot of an air conditioner as reported by the cloud.

    Attributes:
        id: Vendor device id, used for commands and push routing.
        serial: Serial number, stable across accounts.
        status: Connectivity string, "connected" when reachable.
        cur_temp: Room temperature in °C.
        state: Power state.
        pult: Function groups.
        device_info: Brand, series and model.
        title: User-given name.
    """

    id: int = Field(..., description="Vendor device id")
    serial: str | None = Field(default=None)
    status: str | None = Field(default=None)
    cur_temp: int | float | None = Field(default=None, alias="curTemp")
    state: DevicePowerState | None = Field(default=None)
    pult: list[Pult] | None = Field(default=None)
    device_info: DeviceHardwareInfo | None = Field(default=None, alias="deviceInfo")
    title: str | None = Field(default=None)

    @property
    def hardware_model(self) -> str:
        """Return "series model" from the available hardware info."""
        if not self.device_info:
            return ""
        return " ".join(x for x in (self.device_info.seria, self.device_info.model) if x)


class DeviceList(DaichiModel):
    """Device list carried by control responses and push messages."""

    devices: list[Device] = Field(default_factory=list)

    def find(self, device_id: int) -> Device | None:
        """Return the device with ``device_id`` or None."""
        return next((d for d in self.devices if d.id == device_id), None)


class ControlResponse(DaichiModel):
    """Response of ``POST devices/{id}/ctrl``."""

    data: DeviceList | None = Field(default=None)

    def find_device(self, device_id: int) -> Device | None:
        return self.data.find(device_id) if self.data else None


class DeviceResponse(DaichiModel):
    """Response of ``GET devices/{id}``."""

    data: Device | None = Field(default=None)


class MqttUser(DaichiModel):
    """Credentials of the per-user MQTT notification channel."""

    model_config = {"frozen": True}

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    user_id: int | str = Field(..., description="Account id used in the topic name")

    @classmethod
    def from_api(cls, response_data: dict | None) -> MqttUser | None:
        """Build MQTT credentials from the ``GET user`` payload."""
        data = (response_data or {}).get("data") or {}
        mqtt_user = data.get("mqttUser") or {}
        if not (mqtt_user.get("username") and mqtt_user.get("password") and data.get("id")):
            return None
        return cls(
            username=mqtt_user["username"],
            password=mqtt_user["password"],
            user_id=data["id"],
        )


PultFunction.model_rebuild()
