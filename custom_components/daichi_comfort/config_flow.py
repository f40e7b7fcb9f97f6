import logging

import voluptuous as vol

from homeassistant.config_entries import ConfigEntry, ConfigFlow, OptionsFlow
from homeassistant.const import CONF_PASSWORD, CONF_USERNAME

from .constants import CONF_DEVICES, DOMAIN
from .daichi_api import DaichiAPI
from .infrastructure.errors import DaichiAuthError, DaichiError

_LOGGER = logging.getLogger(__name__)


class DaichiConfigFlow(ConfigFlow, domain=DOMAIN):
    VERSION = 1

    async def async_step_user(self, user_input=None):
        errors = {}

        if user_input is not None:
            username = user_input[CONF_USERNAME].strip()
            api = DaichiAPI(username, user_input[CONF_PASSWORD])
            try:
                await api.async_authenticate()
            except DaichiAuthError:
                errors["base"] = "invalid_auth"
            except DaichiError as e:
                _LOGGER.debug("Daichi cloud not reachable: %s", e)
                errors["base"] = "cannot_connect"
            else:
                await self.async_set_unique_id(username.lower())
                self._abort_if_unique_id_configured()
                return self.async_create_entry(
                    title=f"Daichi @ {username}",
                    data={
                        CONF_USERNAME: username,
                        CONF_PASSWORD: user_input[CONF_PASSWORD],
                        CONF_DEVICES: user_input.get(CONF_DEVICES, ""),
                    },
                )
            finally:
                await api.close()

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_USERNAME): str,
                    vol.Required(CONF_PASSWORD): str,
                    vol.Optional(CONF_DEVICES, default=""): str,
                }
            ),
            errors=errors,
        )

    @classmethod
    def async_get_options_flow(cls, entry: ConfigEntry):
        return DaichiOptionsFlow(entry)


class DaichiOptionsFlow(OptionsFlow):
    def __init__(self, entry):
        self.entry = entry

    async def async_step_init(self, user_input=None):
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Optional(
                        CONF_DEVICES,
                        default=self.entry.options.get(
                            CONF_DEVICES, self.entry.data.get(CONF_DEVICES, "")
                        ),
                    ): str,
                }
            ),
        )
