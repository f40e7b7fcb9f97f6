import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_PASSWORD, CONF_USERNAME
from homeassistant.core import HomeAssistant
from homeassistant.helpers import config_validation as cv

from .constants import CONF_DEVICES, DOMAIN, PLATFORMS
from .coordinator import DaichiDeviceCoordinator
from .daichi_api import DaichiAPI
from .device import DaichiDevice
from .models import Device
from .push_client import DaichiPushClient, PushClientConfig

CONFIG_SCHEMA = cv.config_entry_only_config_schema(DOMAIN)

_LOGGER = logging.getLogger(__name__)


def parse_device_filter(value: str | None) -> set[str]:
    """Split a comma-separated list of device titles into a lowercase set."""
    if not value:
        return set()
    return {name.strip().lower() for name in value.split(",") if name.strip()}


def filter_devices(devices: list[Device], device_filter: set[str]) -> list[Device]:
    """Keep devices with a serial and, if a filter is given, a matching title."""
    devices = [device for device in devices if device.serial]
    if not device_filter:
        return devices
    return [
        device
        for device in devices
        if (device.title or "").strip().lower() in device_filter
    ]


async def async_setup(hass: HomeAssistant, config: dict):
    return True  # configured through the UI only


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry):
    username = entry.data.get(CONF_USERNAME)
    password = entry.data.get(CONF_PASSWORD)
    if not username or not password:
        _LOGGER.error("Username and password are required")
        return False

    api = DaichiAPI(username, password)
    await api.async_login()

    device_filter = parse_device_filter(
        entry.options.get(CONF_DEVICES, entry.data.get(CONF_DEVICES))
    )
    devices = filter_devices(await api.async_get_devices(), device_filter)
    if not devices:
        _LOGGER.error("Devices not found")

    coordinators = [
        DaichiDeviceCoordinator(hass, entry, api, DaichiDevice(api, device))
        for device in devices
    ]

    def handle_push_message(topic: str, payload: bytes) -> None:
        for coordinator in coordinators:
            coordinator.handle_push_message(topic, payload)

    push_client = None
    if api.mqtt_user is not None:
        push_client = DaichiPushClient(
            config=PushClientConfig.from_mqtt_user(api.mqtt_user),
            on_message=handle_push_message,
            loop=hass.loop,
        )
        await push_client.async_start()
    else:
        _LOGGER.error("MQTT user is unknown")

    hass.data.setdefault(DOMAIN, {})
    hass.data[DOMAIN][entry.entry_id] = {
        "api": api,
        "coordinators": coordinators,
        "push_client": push_client,
    }

    entry.async_on_unload(entry.add_update_listener(async_reload_entry))
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    return True


async def async_reload_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry after the device filter changed."""
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry):
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if not unload_ok:
        return False

    data = hass.data[DOMAIN].pop(entry.entry_id)
    if data["push_client"] is not None:
        await data["push_client"].async_stop()
    for coordinator in data["coordinators"]:
        await coordinator.async_shutdown()
    await data["api"].close()
    return True
