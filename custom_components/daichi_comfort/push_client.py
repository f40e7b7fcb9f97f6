"""MQTT client for the Daichi per-user notification channel."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import paho.mqtt.client as mqtt

from .constants import MQTT_HOST, MQTT_PATH, MQTT_PORT, MQTT_TOPIC_TEMPLATE
from .models import MqttUser

_LOGGER = logging.getLogger(__name__)

MessageHandler = Callable[[str, bytes], Any]


@dataclass(frozen=True, slots=True)
class PushClientConfig:
    """Runtime configuration for the push client."""

    username: str
    password: str
    topic: str
    host: str = MQTT_HOST
    port: int = MQTT_PORT
    path: str = MQTT_PATH
    qos: int = 0

    @classmethod
    def from_mqtt_user(cls, mqtt_user: MqttUser) -> PushClientConfig:
        return cls(
            username=mqtt_user.username,
            password=mqtt_user.password,
            topic=MQTT_TOPIC_TEMPLATE.format(user_id=mqtt_user.user_id),
        )


def _create_paho_client(client_id: str) -> mqtt.Client:
    """Instantiate a websocket Paho client for ``client_id``."""
    return mqtt.Client(
        mqtt.CallbackAPIVersion.VERSION2,
        client_id=client_id,
        transport="websockets",
    )


class DaichiPushClient:
    """Async wrapper around the notification MQTT connection.

    Paho runs its network loop in a thread; every received message is
    handed to ``on_message`` on the event loop.
    """

    def __init__(
        self,
        *,
        config: PushClientConfig,
        on_message: MessageHandler,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._config = config
        self._on_message = on_message
        self._loop = loop or asyncio.get_event_loop()
        self._mqtt_client: mqtt.Client | None = None

    @property
    def topic(self) -> str:
        return self._config.topic

    def _setup_client(self) -> mqtt.Client:
        client = _create_paho_client(f"daichi-comfort-{uuid.uuid4().hex[:12]}")
        client.username_pw_set(self._config.username, self._config.password)
        client.ws_set_options(path=self._config.path)
        client.tls_set()
        client.on_connect = self._handle_connect
        client.on_connect_fail = self._handle_connect_fail
        client.on_disconnect = self._handle_disconnect
        client.on_message = self._handle_message
        client.connect_async(self._config.host, self._config.port, keepalive=60)
        client.loop_start()
        return client

    async def async_start(self) -> None:
        """Connect to the broker and subscribe once connected."""
        if self._mqtt_client is not None:
            return
        # TLS setup loads certificates from disk
        self._mqtt_client = await self._loop.run_in_executor(None, self._setup_client)

    def _handle_connect(
        self, client: Any, _userdata: Any, _flags: Any, reason_code: Any, _properties: Any
    ) -> None:
        if reason_code.is_failure:
            _LOGGER.error("MQTT connection failed: %s", reason_code)
            return
        client.subscribe(self._config.topic, self._config.qos)
        _LOGGER.debug("Connected to mqtt, subscribed to %s", self._config.topic)

    def _handle_connect_fail(self, _client: Any, _userdata: Any) -> None:
        _LOGGER.error("MQTT got error: unable to connect to %s", self._config.host)

    def _handle_disconnect(
        self, _client: Any, _userdata: Any, _flags: Any, reason_code: Any, _properties: Any
    ) -> None:
        _LOGGER.error("MQTT is disconnected: %s", reason_code)

    def _handle_message(self, _client: Any, _userdata: Any, message: Any) -> None:
        payload = message.payload if message.payload is not None else b"{}"
        self._loop.call_soon_threadsafe(self._on_message, message.topic, payload)

    async def async_stop(self) -> None:
        """Disconnect the MQTT client and stop the network loop."""
        if self._mqtt_client is None:
            return
        client = self._mqtt_client
        self._mqtt_client = None
        client.disconnect()
        client.loop_stop()
