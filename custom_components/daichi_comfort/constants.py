"""Constants and Enums for Daichi Comfort integration."""

from __future__ import annotations

from enum import IntEnum

# Integration Domain
DOMAIN = "daichi_comfort"

# Supported Platforms
PLATFORMS = ["climate", "fan"]

# Config entry keys
CONF_DEVICES = "devices"

# Vendor cloud
API_BASE_URL = "https://web.daichicloud.ru/api/v4/"
API_CLIENT_ID = "sOJO7B6SqgaKudTfCzqLAy540cCuDzpI"

MQTT_HOST = "split.daichicloud.ru"
MQTT_PORT = 443
MQTT_PATH = "/mqtt"
MQTT_TOPIC_TEMPLATE = "user/{user_id}/notification"

# Timeout configuration (seconds)
DEFAULT_READ_TIMEOUT = 10
DEFAULT_WRITE_TIMEOUT = 30

# Number of attempts for a control command; each 401 triggers a re-login
DEFAULT_CONTROL_RETRIES = 2

# Upper bound (inclusive) of the random command correlation id
MAX_COMMAND_ID = 99_999_999

# Status string reported by the cloud for a reachable device
STATUS_CONNECTED = "connected"

# Used when the FanSpeed function reports no value range
DEFAULT_FAN_SPEED_RANGE = [20]

DEFAULT_MANUFACTURER = "Unknown Manufacturer"
DEFAULT_NAME = "Unknown Name"


class ControlMode(IntEnum):
    """Logical control capabilities of an air conditioner."""

    IS_ON = 0
    SET_TEMP = 1
    FAN_SPEED = 2
    FAN_SPEED_AUTO = 3
    FAN_FLOW = 4
    AUTO_MODE = 5
    HEAT_MODE = 6
    COOL_MODE = 7


# Control modes whose command carries a numeric "value" instead of "isOn"
VALUE_CONTROL_MODES = frozenset({ControlMode.SET_TEMP, ControlMode.FAN_SPEED})

# Mode functions in the precedence used to read the active operating mode
OPERATING_MODES = (
    ControlMode.AUTO_MODE,
    ControlMode.HEAT_MODE,
    ControlMode.COOL_MODE,
)

# On-command strings carried by the operating mode functions
MODE_AUTO = "auto"
MODE_HEAT = "heat"
MODE_COOL = "cool"

FAN_PRESET_AUTO = "auto"
