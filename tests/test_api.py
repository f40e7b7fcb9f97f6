"""Tests for the Daichi cloud API client."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from custom_components.daichi_comfort.constants import ControlMode
from custom_components.daichi_comfort.daichi_api import (
    ApiSession,
    DaichiAPI,
    build_control_payload,
)
from custom_components.daichi_comfort.infrastructure.errors import (
    DaichiAPIError,
    DaichiAuthError,
    DaichiConnectionError,
    DaichiTimeoutError,
    DaichiValidationError,
)
from custom_components.daichi_comfort.models import ControlResponse

TOKEN_RESPONSE = {"data": {"access_token": "token-1"}}
USER_RESPONSE = {"data": {"id": 42, "mqttUser": {"username": "mq", "password": "pw"}}}


class TestApiSession:
    """Test ApiSession token holder."""

    def test_unauthenticated(self):
        session = ApiSession()

        assert session.authenticated is False
        assert session.headers() == {}

    def test_bearer_header(self):
        session = ApiSession(token="abc")

        assert session.authenticated is True
        assert session.headers() == {"Authorization": "Bearer abc"}


class TestBuildControlPayload:
    """Test control command bodies."""

    def test_value_modes(self):
        payload = build_control_payload(ControlMode.SET_TEMP, 102, 23)

        assert payload["value"] == {"functionId": 102, "value": 23, "parameters": None}
        assert payload["conflictResolveData"] is None
        assert 0 <= payload["cmdId"] <= 99_999_999

    def test_is_on_modes(self):
        payload = build_control_payload(ControlMode.COOL_MODE, 108, True)

        assert payload["value"] == {"functionId": 108, "isOn": True, "parameters": None}

    def test_none_value_rejected(self):
        with pytest.raises(DaichiValidationError):
            build_control_payload(ControlMode.IS_ON, 101, None)


class TestDaichiAPI:
    """Test DaichiAPI class."""

    def test_api_initialization(self):
        api = DaichiAPI("user@example.com", "secret", "https://cloud.test/api")

        assert api.base_url == "https://cloud.test/api/"
        assert api.session.token is None
        assert api.mqtt_user is None

    @pytest.mark.asyncio
    async def test_request_sends_bearer_header(self, make_response):
        api = DaichiAPI("user@example.com", "secret", "https://cloud.test/api/")
        api.session.token = "abc"
        mock_session = AsyncMock()
        mock_session.request = MagicMock(return_value=make_response(200, {"ok": True}))

        with patch.object(api, "_get_session", AsyncMock(return_value=mock_session)):
            data = await api._async_request("GET", "buildings")

        assert data == {"ok": True}
        args, kwargs = mock_session.request.call_args
        assert args == ("GET", "https://cloud.test/api/buildings")
        assert kwargs["headers"] == {"Authorization": "Bearer abc"}
        assert isinstance(kwargs["timeout"], aiohttp.ClientTimeout)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "error"), [(401, DaichiAuthError), (500, DaichiAPIError)]
    )
    async def test_request_status_errors(self, make_response, status, error):
        api = DaichiAPI("user@example.com", "secret")
        mock_session = AsyncMock()
        mock_session.request = MagicMock(return_value=make_response(status))

        with patch.object(api, "_get_session", AsyncMock(return_value=mock_session)):
            with pytest.raises(error) as exc_info:
                await api._async_request("GET", "buildings")

        assert exc_info.value.status == status

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("raised", "error"),
        [
            (asyncio.TimeoutError(), DaichiTimeoutError),
            (aiohttp.ClientConnectionError("refused"), DaichiConnectionError),
        ],
    )
    async def test_request_transport_errors(self, raised, error):
        api = DaichiAPI("user@example.com", "secret")
        mock_session = AsyncMock()
        mock_session.request = MagicMock(side_effect=raised)

        with patch.object(api, "_get_session", AsyncMock(return_value=mock_session)):
            with pytest.raises(error):
                await api._async_request("GET", "buildings")

    @pytest.mark.asyncio
    async def test_login(self):
        api = DaichiAPI("user@example.com", "secret")

        with patch.object(
            api, "_async_request", AsyncMock(side_effect=[TOKEN_RESPONSE, USER_RESPONSE])
        ) as mock_request:
            assert await api.async_login() is True

        assert api.session.token == "token-1"
        assert api.mqtt_user.user_id == 42
        login_call = mock_request.call_args_list[0]
        assert login_call.args == ("POST", "token")
        assert login_call.kwargs["payload"]["email"] == "user@example.com"
        assert login_call.kwargs["authenticated"] is False

    @pytest.mark.asyncio
    async def test_login_without_token(self):
        api = DaichiAPI("user@example.com", "secret")
        api.session.token = "stale"

        with patch.object(api, "_async_request", AsyncMock(return_value={"data": {}})):
            assert await api.async_login() is False

        assert api.session.token is None
        assert api.mqtt_user is None

    @pytest.mark.asyncio
    async def test_authenticate_raises(self):
        api = DaichiAPI("user@example.com", "secret")

        with patch.object(
            api, "_async_request", AsyncMock(side_effect=DaichiAuthError("denied", status=401))
        ):
            with pytest.raises(DaichiAuthError):
                await api.async_authenticate()

    @pytest.mark.asyncio
    async def test_login_keeps_token_when_user_lookup_fails(self):
        api = DaichiAPI("user@example.com", "secret")

        with patch.object(
            api,
            "_async_request",
            AsyncMock(side_effect=[TOKEN_RESPONSE, DaichiConnectionError("down")]),
        ):
            assert await api.async_login() is True

        assert api.session.token == "token-1"
        assert api.mqtt_user is None

    @pytest.mark.asyncio
    async def test_get_devices(self):
        api = DaichiAPI("user@example.com", "secret")
        responses = {
            "buildings": {"data": [{"places": [{"id": 5}, {"id": 6}]}, {"places": []}]},
            "devices/5": {"data": {"id": 5, "serial": "A"}},
            "devices/6": {"data": {"id": 6, "serial": "B"}},
        }

        async def fake_request(method, path, **kwargs):
            return responses[path]

        with patch.object(api, "_async_request", side_effect=fake_request):
            devices = await api.async_get_devices()

        assert [d.id for d in devices] == [5, 6]

    @pytest.mark.asyncio
    async def test_get_devices_skips_failed_fetch(self):
        api = DaichiAPI("user@example.com", "secret")

        async def fake_request(method, path, **kwargs):
            if path == "buildings":
                return {"data": [{"places": [{"id": 5}, {"id": 6}]}]}
            if path == "devices/6":
                raise DaichiAPIError("gone", status=404)
            return {"data": {"id": 5}}

        with patch.object(api, "_async_request", side_effect=fake_request):
            devices = await api.async_get_devices()

        assert [d.id for d in devices] == [5]

    @pytest.mark.asyncio
    async def test_get_devices_invalid_json_body(self, make_response):
        api = DaichiAPI("user@example.com", "secret")
        response = make_response(200)
        response.__aenter__.return_value.json.side_effect = json.JSONDecodeError(
            "Expecting value", "", 0
        )
        mock_session = AsyncMock()
        mock_session.request = MagicMock(return_value=response)

        with patch.object(api, "_get_session", AsyncMock(return_value=mock_session)):
            assert await api.async_get_devices() == []

    @pytest.mark.asyncio
    async def test_request_invalid_json_body(self, make_response):
        api = DaichiAPI("user@example.com", "secret")
        response = make_response(200)
        response.__aenter__.return_value.json.side_effect = ValueError("not json")
        mock_session = AsyncMock()
        mock_session.request = MagicMock(return_value=response)

        with patch.object(api, "_get_session", AsyncMock(return_value=mock_session)):
            with pytest.raises(DaichiAPIError) as exc_info:
                await api._async_request("GET", "buildings")

        assert not isinstance(exc_info.value, DaichiAuthError)
        assert exc_info.value.status == 200

    @pytest.mark.asyncio
    async def test_get_devices_buildings_failure(self):
        api = DaichiAPI("user@example.com", "secret")

        with patch.object(
            api, "_async_request", AsyncMock(side_effect=DaichiConnectionError("down"))
        ):
            assert await api.async_get_devices() == []


class TestControlDevice:
    """Test async_control_device retry behaviour."""

    @pytest.mark.asyncio
    async def test_success(self):
        api = DaichiAPI("user@example.com", "secret")
        body = {"data": {"devices": [{"id": 5}]}}

        with patch.object(api, "_async_request", AsyncMock(return_value=body)) as mock_request:
            result = await api.async_control_device(5, ControlMode.IS_ON, 101, True)

        assert isinstance(result, ControlResponse)
        assert result.find_device(5).id == 5
        args, kwargs = mock_request.call_args
        assert args == ("POST", "devices/5/ctrl?ignoreConflicts=false")
        assert kwargs["payload"]["value"]["isOn"] is True
        assert kwargs["timeout"] == 30

    @pytest.mark.asyncio
    async def test_unauthorized_once_relogins_and_retries(self):
        api = DaichiAPI("user@example.com", "secret")
        body = {"data": {"devices": [{"id": 5, "curTemp": 21}]}}
        mock_request = AsyncMock(side_effect=[DaichiAuthError("401", status=401), body])

        with (
            patch.object(api, "_async_request", mock_request),
            patch.object(api, "async_login", AsyncMock(return_value=True)) as mock_login,
        ):
            result = await api.async_control_device(5, ControlMode.SET_TEMP, 102, 23, 2)

        mock_login.assert_awaited_once()
        assert mock_request.await_count == 2
        assert result.find_device(5).cur_temp == 21

    @pytest.mark.asyncio
    async def test_unauthorized_exhausts_retries(self):
        api = DaichiAPI("user@example.com", "secret")
        mock_request = AsyncMock(side_effect=DaichiAuthError("401", status=401))

        with (
            patch.object(api, "_async_request", mock_request),
            patch.object(api, "async_login", AsyncMock(return_value=True)) as mock_login,
        ):
            result = await api.async_control_device(5, ControlMode.SET_TEMP, 102, 23, 2)

        assert result is None
        assert mock_request.await_count == 2
        assert mock_login.await_count == 2

    @pytest.mark.asyncio
    async def test_value_none_makes_no_request(self):
        api = DaichiAPI("user@example.com", "secret")

        with patch.object(api, "_async_request", AsyncMock()) as mock_request:
            result = await api.async_control_device(5, ControlMode.SET_TEMP, 102, None)

        assert result is None
        mock_request.assert_not_called()

    @pytest.mark.asyncio
    async def test_zero_retries(self):
        api = DaichiAPI("user@example.com", "secret")

        with patch.object(api, "_async_request", AsyncMock()) as mock_request:
            assert await api.async_control_device(5, ControlMode.IS_ON, 101, True, 0) is None

        mock_request.assert_not_called()

    @pytest.mark.asyncio
    async def test_server_error_is_not_retried(self):
        api = DaichiAPI("user@example.com", "secret")
        mock_request = AsyncMock(side_effect=DaichiAPIError("boom", status=500))

        with (
            patch.object(api, "_async_request", mock_request),
            patch.object(api, "async_login", AsyncMock()) as mock_login,
        ):
            assert await api.async_control_device(5, ControlMode.IS_ON, 101, True) is None

        assert mock_request.await_count == 1
        mock_login.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_json_body_returns_none(self, make_response):
        api = DaichiAPI("user@example.com", "secret")
        response = make_response(200)
        response.__aenter__.return_value.json.side_effect = json.JSONDecodeError(
            "Expecting value", "", 0
        )
        mock_session = AsyncMock()
        mock_session.request = MagicMock(return_value=response)

        with patch.object(api, "_get_session", AsyncMock(return_value=mock_session)):
            result = await api.async_control_device(5, ControlMode.IS_ON, 101, True)

        assert result is None
        assert mock_session.request.call_count == 1

    @pytest.mark.asyncio
    async def test_close(self):
        api = DaichiAPI("user@example.com", "secret")
        api._session = MagicMock(closed=False, close=AsyncMock())

        await api.close()

        api._session.close.assert_awaited_once()
