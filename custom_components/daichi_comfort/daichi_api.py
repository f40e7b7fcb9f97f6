# daichi_api.py
"""Client for the Daichi cloud REST API.

Public coroutines catch transport and API failures at this boundary,
log them and return a sentinel (None, an empty list or False).
:meth:`DaichiAPI.async_authenticate` is the exception: the config flow
needs the failure type to pick its error message.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any

import aiohttp
from pydantic import ValidationError

from .constants import (
    API_BASE_URL,
    API_CLIENT_ID,
    DEFAULT_CONTROL_RETRIES,
    DEFAULT_READ_TIMEOUT,
    DEFAULT_WRITE_TIMEOUT,
    MAX_COMMAND_ID,
    VALUE_CONTROL_MODES,
    ControlMode,
)
from .infrastructure.errors import (
    DaichiAPIError,
    DaichiAuthError,
    DaichiConnectionError,
    DaichiError,
    DaichiTimeoutError,
    DaichiValidationError,
)
from .models import ControlResponse, Device, DeviceResponse, MqttUser

_LOGGER = logging.getLogger(__name__)


@dataclass
class ApiSession:
    """Authentication state of one cloud account."""

    token: str | None = None

    @property
    def authenticated(self) -> bool:
        return bool(self.token)

    def headers(self) -> dict[str, str]:
        """Return the headers to attach to an authenticated request."""
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}


def build_control_payload(
    mode: ControlMode, function_id: int, value: bool | float | None
) -> dict[str, Any]:
    """Build the body of a control command.

    SetTemp and FanSpeed carry a numeric ``value``, every other mode an
    ``isOn`` flag.

    Raises:
        DaichiValidationError: If ``value`` is None.
    """
    if value is None:
        raise DaichiValidationError(f"Control value for {mode.name} is None")

    field = "value" if mode in VALUE_CONTROL_MODES else "isOn"
    return {
        "cmdId": random.randint(0, MAX_COMMAND_ID),
        "value": {
            "functionId": function_id,
            field: value,
            "parameters": None,
        },
        "conflictResolveData": None,
    }


class DaichiAPI:
    def __init__(self, username: str, password: str, base_url: str = API_BASE_URL):
        self.username = username
        self.password = password
        self.base_url = base_url.rstrip("/") + "/"
        self.session = ApiSession()
        self.mqtt_user: MqttUser | None = None
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session.

        Timeouts are set per request, reads and writes use different ones.
        """
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self):
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _async_request(
        self,
        method: str,
        path: str,
        *,
        payload: dict | None = None,
        timeout: float = DEFAULT_READ_TIMEOUT,
        authenticated: bool = True,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            DaichiAuthError: On HTTP 401.
            DaichiAPIError: On any other non-2xx status or a body that is not JSON.
            DaichiTimeoutError: If the request times out.
            DaichiConnectionError: If the cloud cannot be reached.
        """
        url = self.base_url + path.lstrip("/")
        headers = self.session.headers() if authenticated else {}
        try:
            session = await self._get_session()
            async with session.request(
                method,
                url,
                json=payload,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                if response.status == 401:
                    raise DaichiAuthError(f"{method} {path}: Unauthorized", status=401)
                if not 200 <= response.status < 300:
                    raise DaichiAPIError(
                        f"{method} {path}: Status code is {response.status}",
                        status=response.status,
                    )
                try:
                    data = await response.json()
                except (aiohttp.ContentTypeError, ValueError) as e:
                    raise DaichiAPIError(
                        f"{method} {path}: Invalid response body: {e}",
                        status=response.status,
                    ) from e
        except asyncio.TimeoutError as e:
            raise DaichiTimeoutError(f"{method} {path} timed out") from e
        except aiohttp.ClientError as e:
            raise DaichiConnectionError(f"{method} {path} failed: {e}") from e

        _LOGGER.debug("API %s %s returned data: %s", method, url, data)
        return data

    async def async_authenticate(self) -> str:
        """Request an access token and store it in the session.

        Raises:
            DaichiAuthError: If the credentials are rejected or no token is issued.
            DaichiError: On any other transport or API failure.
        """
        self.session.token = None
        data = await self._async_request(
            "POST",
            "token",
            payload={
                "grant_type": "password",
                "email": self.username,
                "password": self.password,
                "clientId": API_CLIENT_ID,
            },
            authenticated=False,
        )
        token = ((data or {}).get("data") or {}).get("access_token")
        if not token:
            raise DaichiAuthError("login: Unauthorized! Invalid token")
        self.session.token = token
        return token

    async def async_login(self) -> bool:
        """Obtain an access token and the MQTT credentials.

        Returns:
            True if a token was issued, False otherwise (the failure is logged).
        """
        try:
            await self.async_authenticate()
        except DaichiError as e:
            _LOGGER.error("Login failed: %s", e)
            return False

        _LOGGER.info("Logged in to Daichi cloud as %s", self.username)
        await self._async_fetch_mqtt_user()
        return True

    async def _async_fetch_mqtt_user(self) -> None:
        try:
            data = await self._async_request("GET", "user")
        except DaichiError as e:
            _LOGGER.error("Fetching MQTT user failed: %s", e)
            return
        self.mqtt_user = MqttUser.from_api(data)

    async def async_get_device(self, device_id: int) -> Device | None:
        """Fetch the full state of one device."""
        try:
            data = await self._async_request("GET", f"devices/{device_id}")
            return DeviceResponse.model_validate(data).data
        except (DaichiError, ValidationError) as e:
            _LOGGER.error("Fetching device %s failed: %s", device_id, e)
            return None

    async def async_get_devices(self) -> list[Device]:
        """Return every device of every building of the account."""
        try:
            buildings = await self._async_request("GET", "buildings")
        except DaichiError as e:
            _LOGGER.error("Fetching buildings failed: %s", e)
            return []

        device_ids = [
            place["id"]
            for building in (buildings or {}).get("data") or []
            for place in building.get("places") or []
            if place.get("id") is not None
        ]
        devices = await asyncio.gather(*(self.async_get_device(x) for x in device_ids))
        return [device for device in devices if device is not None]

    async def async_control_device(
        self,
        device_id: int,
        mode: ControlMode,
        function_id: int,
        value: bool | float | None,
        retry_count: int = DEFAULT_CONTROL_RETRIES,
    ) -> ControlResponse | None:
        """Send a control command and return the refreshed device list.

        An authentication failure triggers a re-login and a retry with
        ``retry_count - 1``. Any other failure is logged and not retried.

        Returns:
            The parsed response, or None if the command was rejected or failed.
        """
        if retry_count <= 0:
            return None

        try:
            payload = build_control_payload(mode, function_id, value)
        except DaichiValidationError as e:
            _LOGGER.error("controlDevice: %s", e)
            return None

        try:
            data = await self._async_request(
                "POST",
                f"devices/{device_id}/ctrl?ignoreConflicts=false",
                payload=payload,
                timeout=DEFAULT_WRITE_TIMEOUT,
            )
        except DaichiAuthError:
            _LOGGER.error("controlDevice: Unauthorized! Invalid token")
            await self.async_login()
            return await self.async_control_device(
                device_id, mode, function_id, value, retry_count - 1
            )
        except DaichiError as e:
            _LOGGER.error("controlDevice: %s", e)
            return None

        try:
            return ControlResponse.model_validate(data)
        except ValidationError as e:
            _LOGGER.error("controlDevice: unexpected response %s: %s", data, e)
            return None
