"""Common fixtures for Daichi Comfort tests."""
import copy
from unittest.mock import AsyncMock, MagicMock

import pytest
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from custom_components.daichi_comfort.device import DaichiDevice
from custom_components.daichi_comfort.models import Device


def _function(function_id, title, tag, on_command=None, **state):
    return {
        "id": function_id,
        "title": title,
        "state": state,
        "metaData": {"bleTagInfo": {"bleTag": tag, "bleOnCommand": on_command}},
    }


DEVICE_PAYLOAD = {
    "id": 5,
    "serial": "DC-000005",
    "status": "connected",
    "curTemp": 24,
    "title": "Living room",
    "state": {"isOn": True},
    "deviceInfo": {"brand": "Daichi", "seria": "Alpha", "model": "A25AVQ1"},
    "pult": [
        {
            "functions": [
                _function(101, "Power", "power", isOn=True),
                _function(102, "Temperature", "setTemp", value=22, valueRange=[16, 32]),
                {
                    **_function(103, "Fan speed", "fanSpeed", value=3, valueRange=[1, 5]),
                    "linkedFunction": _function(104, "Auto", "fanSpeed", "0", isOn=False),
                },
                _function(105, "Vertical swing", "flow", "vert_on", isOn=True),
            ]
        },
        {
            "functions": [
                _function(106, "Auto", "mode", "auto", isOn=False),
                _function(107, "Heat", "mode", "heat", isOn=False),
                _function(108, "Cool", "mode", "cool", isOn=True),
            ]
        },
    ],
}


@pytest.fixture
def device_payload():
    """Return a fresh copy of a fully featured device payload."""
    return copy.deepcopy(DEVICE_PAYLOAD)


@pytest.fixture
def device_model(device_payload):
    return Device.model_validate(device_payload)


@pytest.fixture
def mock_hass():
    """Create a mock Home Assistant instance."""
    hass = MagicMock(spec=HomeAssistant)
    hass.data = {}
    hass.loop = None
    hass.async_create_task = MagicMock()
    hass.add_job = MagicMock()
    return hass


@pytest.fixture
def mock_config_entry():
    """Create a mock config entry."""
    entry = MagicMock(spec=ConfigEntry)
    entry.entry_id = "test_entry_id"
    entry.data = {"username": "user@example.com", "password": "secret", "devices": ""}
    entry.options = {}
    return entry


@pytest.fixture
def mock_api():
    """Create a mock DaichiAPI instance."""
    api = MagicMock()
    api.mqtt_user = None
    api.async_login = AsyncMock(return_value=True)
    api.async_get_devices = AsyncMock(return_value=[])
    api.async_get_device = AsyncMock(return_value=None)
    api.async_control_device = AsyncMock(return_value=None)
    api.close = AsyncMock()
    return api


@pytest.fixture
def daichi_device(mock_api, device_model):
    return DaichiDevice(mock_api, device_model)


@pytest.fixture
def mock_coordinator(daichi_device):
    """Create a mock coordinator wrapping a real device core."""
    coordinator = MagicMock()
    coordinator.device = daichi_device
    coordinator.data = daichi_device.values
    coordinator.async_send_command = AsyncMock(return_value=True)
    coordinator.async_request_refresh = AsyncMock()
    coordinator.async_add_listener = MagicMock(return_value=lambda: None)
    coordinator.last_update_success = True
    return coordinator


@pytest.fixture
def make_response():
    """Return a factory of mocked aiohttp responses usable with ``async with``."""

    def _make_response(status=200, json_data=None):
        response = AsyncMock()
        response.status = status
        response.json = AsyncMock(return_value=json_data)
        return AsyncMock(__aenter__=AsyncMock(return_value=response))

    return _make_response
