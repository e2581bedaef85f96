"""Config flow for Voltas IR Climate."""
import logging
import voluptuous as vol
from tinytuya import Contrib

from .const import (
    DOMAIN,
    DEFAULT_FRIENDLY_NAME,
    CONF_LOCAL_KEY,
    CONF_PROTOCOL_VERSION,
    CONF_TEMPERATURE_SENSOR,
    CONF_HUMIDITY_SENSOR,
    TUYA_VERSIONS,
)

from homeassistant import config_entries
from homeassistant.core import callback
import homeassistant.helpers.config_validation as cv
from homeassistant.const import CONF_NAME, CONF_HOST, CONF_DEVICE_ID
from homeassistant.helpers import entity_registry as er

_LOGGER = logging.getLogger(__name__)

TEMPERATURE_UNITS = ['°c', '°f', 'c', 'f']


def _sensor_options(hass):
    """Return ({entity_id: label} temperature, {entity_id: label} humidity)."""
    entity_reg = er.async_get(hass)
    temp_sensors = {}
    humidity_sensors = {}

    for entity in entity_reg.entities.values():
        entity_id = entity.entity_id
        if not entity_id.startswith('sensor.'):
            continue

        state = hass.states.get(entity_id)
        if not state:
            continue

        friendly_name = entity.original_name or entity_id
        label = f"{friendly_name} ({entity_id})"
        unit = (state.attributes.get('unit_of_measurement') or '').lower()

        if unit in TEMPERATURE_UNITS or 'temperature' in entity_id.lower():
            temp_sensors[entity_id] = label
        elif unit == '%' or 'humidity' in entity_id.lower():
            humidity_sensors[entity_id] = label

    _LOGGER.debug("Found %d temp sensors, %d humidity sensors", len(temp_sensors), len(humidity_sensors))
    return temp_sensors, humidity_sensors


def _test_connection(dev_id, address, local_key, version):
    """Blocking connection test"""
    _LOGGER.debug("Testing connection to %s at %s with version %s", dev_id, address, version)
    try:
        device = Contrib.IRRemoteControlDevice(
            dev_id=dev_id,
            address=address,
            local_key=local_key,
            version=version,
            connection_timeout=10,
            connection_retry_limit=3
        )
        status = device.status()
        device.close()
        _LOGGER.debug("Connection test status: %s", status)
        return status or {"Error": "No status"}
    except Exception as e:
        _LOGGER.debug("Connection test failed: %s", e)
        return {"Error": str(e)}


def detect_protocol_version(dev_id, address, local_key):
    """Return the first Tuya protocol version the device answers on, or None."""
    for version in TUYA_VERSIONS:
        status = _test_connection(dev_id, address, local_key, version)
        if "Error" not in status:
            _LOGGER.debug("Connection successful with version %s", version)
            return version
    return None


class VoltasClimateConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    VERSION = 1

    def __init__(self):
        self.config = {
            CONF_NAME: DEFAULT_FRIENDLY_NAME,
            CONF_DEVICE_ID: '',
            CONF_LOCAL_KEY: '',
            CONF_PROTOCOL_VERSION: 'Auto',
            CONF_HOST: '',
            CONF_TEMPERATURE_SENSOR: '',
            CONF_HUMIDITY_SENSOR: '',
        }

    @staticmethod
    @callback
    def async_get_options_flow(entry):
        return VoltasClimateOptionsFlow(entry)

    async def async_step_user(self, user_input=None):
        """Manual device configuration."""
        errors = {}
        if user_input is not None:
            await self.async_set_unique_id(user_input[CONF_DEVICE_ID])
            self._abort_if_unique_id_configured()

            self.config.update(user_input)
            version = await self.hass.async_add_executor_job(
                detect_protocol_version,
                user_input[CONF_DEVICE_ID],
                user_input[CONF_HOST],
                user_input[CONF_LOCAL_KEY],
            )

            if version is not None:
                self.config[CONF_PROTOCOL_VERSION] = version
                return await self.async_step_sensor_selection()
            errors["base"] = "cannot_connect"

        schema = vol.Schema({
            vol.Required(CONF_NAME, default=self.config.get(CONF_NAME, DEFAULT_FRIENDLY_NAME)): cv.string,
            vol.Required(CONF_HOST, default=self.config.get(CONF_HOST, "")): cv.string,
            vol.Required(CONF_DEVICE_ID, default=self.config.get(CONF_DEVICE_ID, "")): cv.string,
            vol.Required(CONF_LOCAL_KEY, default=self.config.get(CONF_LOCAL_KEY, "")): cv.string,
        })

        return self.async_show_form(
            step_id="user",
            errors=errors,
            data_schema=schema
        )

    async def async_step_sensor_selection(self, user_input=None):
        """Optional room temperature and humidity sensors."""
        if user_input is not None:
            self.config[CONF_TEMPERATURE_SENSOR] = user_input.get(CONF_TEMPERATURE_SENSOR, '')
            self.config[CONF_HUMIDITY_SENSOR] = user_input.get(CONF_HUMIDITY_SENSOR, '')

            _LOGGER.debug("Final config - Temp: '%s', Humidity: '%s'",
                         self.config[CONF_TEMPERATURE_SENSOR],
                         self.config[CONF_HUMIDITY_SENSOR])

            return self.async_create_entry(
                title=self.config[CONF_NAME],
                data=self.config
            )

        temp_sensors, humidity_sensors = _sensor_options(self.hass)

        schema = vol.Schema({
            vol.Optional(CONF_TEMPERATURE_SENSOR, default=''): vol.In({'': 'No Temperature Sensor', **temp_sensors}),
            vol.Optional(CONF_HUMIDITY_SENSOR, default=''): vol.In({'': 'No Humidity Sensor', **humidity_sensors}),
        })

        return self.async_show_form(
            step_id="sensor_selection",
            data_schema=schema,
            description_placeholders={
                "climate_name": self.config[CONF_NAME]
            }
        )


class VoltasClimateOptionsFlow(config_entries.OptionsFlow):
    """Options flow for Voltas IR Climate."""

    def __init__(self, entry):
        self.entry = entry
        self.config = dict(entry.data.items())

    async def async_step_init(self, user_input=None):
        """Change the room sensors."""
        if user_input is not None:
            _LOGGER.debug("Options user input: %s", user_input)

            updated_config = dict(self.config)
            updated_config[CONF_TEMPERATURE_SENSOR] = user_input.get(CONF_TEMPERATURE_SENSOR, '')
            updated_config[CONF_HUMIDITY_SENSOR] = user_input.get(CONF_HUMIDITY_SENSOR, '')

            self.hass.config_entries.async_update_entry(self.entry, data=updated_config)
            return self.async_create_entry(title="", data={})

        temp_sensors, humidity_sensors = _sensor_options(self.hass)
        sensor_options = {'': 'No Sensor', **temp_sensors, **humidity_sensors}

        schema = vol.Schema({
            vol.Optional(
                CONF_TEMPERATURE_SENSOR,
                default=self.config.get(CONF_TEMPERATURE_SENSOR, '')
            ): vol.In(sensor_options),
            vol.Optional(
                CONF_HUMIDITY_SENSOR,
                default=self.config.get(CONF_HUMIDITY_SENSOR, '')
            ): vol.In(sensor_options),
        })

        return self.async_show_form(
            step_id="init",
            data_schema=schema
        )
