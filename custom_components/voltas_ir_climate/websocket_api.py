"""Websocket commands for the Voltas IR Climate integration."""
import logging
import voluptuous as vol

from homeassistant.components import websocket_api
from homeassistant.core import HomeAssistant, callback
import homeassistant.helpers.config_validation as cv
from homeassistant.exceptions import HomeAssistantError

from .const import DOMAIN, WS_TYPE_AC_CONTROL, WS_TYPE_STATUS
from .climate_protocols.voltas import AcCommandRequest, format_signal

_LOGGER = logging.getLogger(__name__)

# Any JSON value is accepted; normalization maps bad values to safe defaults
_ANY = cv.match_all

# A missing or unreadable temp is read as 0 and clamps to 16
MISSING_TEMPERATURE = 0

AC_CONTROL_FIELDS = {
    vol.Optional("entry_id"): str,
    vol.Optional("power"): _ANY,
    vol.Optional("mode"): _ANY,
    vol.Optional("temp"): _ANY,
    vol.Optional("fan", default="NONE"): _ANY,
}


def request_from_message(msg):
    """Build a command request from an ac_control message."""
    return AcCommandRequest.from_values(
        power=msg.get("power"),
        mode=msg.get("mode"),
        temp=msg.get("temp"),
        fan=msg.get("fan", "NONE"),
        temp_default=MISSING_TEMPERATURE,
    )


def resolve_entity(hass, entry_id=None):
    """Return the climate entity for entry_id, or the only one configured."""
    entities = hass.data.get(DOMAIN, {})
    if entry_id is not None:
        return entities.get(entry_id)
    if len(entities) == 1:
        return next(iter(entities.values()))
    return None


@callback
def async_register(hass: HomeAssistant):
    websocket_api.async_register_command(hass, websocket_ac_control)
    websocket_api.async_register_command(hass, websocket_status)


@websocket_api.websocket_command({vol.Required("type"): WS_TYPE_AC_CONTROL, **AC_CONTROL_FIELDS})
@websocket_api.async_response
async def websocket_ac_control(hass, connection, msg):
    """Encode and send one AC command."""
    request = request_from_message(msg)
    _LOGGER.debug("AC Command: P=%s, T=%s, M=%s, F=%s",
                  msg.get("power"), msg.get("temp"), msg.get("mode"), msg.get("fan"))

    entity = resolve_entity(hass, msg.get("entry_id"))
    if entity is None:
        connection.send_error(msg["id"], websocket_api.ERR_NOT_FOUND, "No Voltas climate entity found")
        return

    try:
        signal = await entity.async_send_request(request)
    except HomeAssistantError as e:
        connection.send_error(msg["id"], websocket_api.ERR_HOME_ASSISTANT_ERROR, str(e))
        return

    connection.send_result(msg["id"], {"signal": format_signal(signal), "bytes": list(signal)})


@websocket_api.websocket_command({vol.Required("type"): WS_TYPE_STATUS, vol.Optional("entry_id"): str})
@callback
def websocket_status(hass, connection, msg):
    """Return room sensor readings and AC settings."""
    entity = resolve_entity(hass, msg.get("entry_id"))
    if entity is None:
        connection.send_error(msg["id"], websocket_api.ERR_NOT_FOUND, "No Voltas climate entity found")
        return

    connection.send_result(msg["id"], entity.status())
