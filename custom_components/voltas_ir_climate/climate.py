"""Support for Voltas IR Climate Control."""
import base64
import logging
import threading
from tinytuya import Contrib, Device

from homeassistant.components.climate import (
    ClimateEntity,
    ClimateEntityFeature,
    HVACMode,
    HVACAction,
)
from homeassistant.const import ATTR_TEMPERATURE, UnitOfTemperature
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.restore_state import RestoreEntity
from homeassistant.core import callback
from homeassistant.helpers import event

from .const import (
    DOMAIN,
    DEFAULT_FRIENDLY_NAME,
    DEFAULT_CLIMATE_BRAND,
    CONF_TEMPERATURE_SENSOR,
    CONF_HUMIDITY_SENSOR,
    IR_SEND_DPS,
)
from .climate_protocols import get_protocol
from .climate_protocols.voltas import FanSpeed, Mode, Power, clamp_temperature, format_signal

_LOGGER = logging.getLogger(__name__)

HVAC_MODE_MAPPING = {
    "off": HVACMode.OFF,
    "heat": HVACMode.HEAT,
    "cool": HVACMode.COOL,
    "dry": HVACMode.DRY,
    "fan_only": HVACMode.FAN_ONLY,
}

HVAC_ACTION_MAPPING = {
    "off": HVACAction.OFF,
    "heating": HVACAction.HEATING,
    "cooling": HVACAction.COOLING,
    "drying": HVACAction.DRYING,
    "idle": HVACAction.IDLE,
    "fan": HVACAction.FAN,
}

# Entity state implied by a request; UNKNOWN is sent as COOL
REQUEST_MODE_TO_HVAC = {
    Mode.COOL: "cool",
    Mode.HEAT: "heat",
    Mode.DRY: "dry",
    Mode.FAN: "fan_only",
    Mode.UNKNOWN: "cool",
}

def _hvac_action_for(hvac_mode):
    if hvac_mode == "heat":
        return "heating"
    if hvac_mode == "cool":
        return "cooling"
    if hvac_mode == "dry":
        return "drying"
    if hvac_mode == "fan_only":
        return "fan"
    if hvac_mode == "off":
        return "off"
    return "idle"

def _parse_sensor_state(state):
    if state is None or state.state in ("unknown", "unavailable"):
        return None
    try:
        return float(state.state)
    except (ValueError, TypeError):
        _LOGGER.debug("Invalid sensor value: %s", state.state)
        return None

async def async_setup_entry(hass, entry, async_add_entities):
    """Set up platform from config entry."""
    _LOGGER.debug("Setting up entry: %s", entry.data)
    config = entry.data

    climate = VoltasIRClimate(
        hass=hass,
        name=config.get("name", DEFAULT_FRIENDLY_NAME),
        dev_id=config.get("device_id"),
        address=config.get("host"),
        local_key=config.get("local_key"),
        protocol_version=config.get("protocol_version"),
        temperature_sensor=config.get(CONF_TEMPERATURE_SENSOR, ""),
        humidity_sensor=config.get(CONF_HUMIDITY_SENSOR, ""),
    )

    await hass.async_add_executor_job(climate._update_availability)
    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = climate
    async_add_entities([climate])


class VoltasIRClimate(ClimateEntity, RestoreEntity):
    def __init__(self, hass, name, dev_id, address, local_key, protocol_version, temperature_sensor="", humidity_sensor=""):
        """Initialize the climate device."""
        self.hass = hass
        self._attr_name = name
        self._attr_has_entity_name = True
        self._dev_id = dev_id
        self._address = address
        self._local_key = local_key
        self._protocol_version = float(protocol_version) if protocol_version not in (None, "Auto") else 3.3
        self._temperature_sensor = temperature_sensor
        self._humidity_sensor = humidity_sensor

        self._protocol = get_protocol(DEFAULT_CLIMATE_BRAND)

        self._device = None
        self._available = False
        self._lock = threading.Lock()

        # Defaults when nothing can be restored
        self._hvac_mode = "off"
        self._hvac_action = "off"
        self._target_temperature = 24
        self._current_temperature = None
        self._current_humidity = None
        self._fan_mode = "default"
        self._last_signal = None

        self._temp_listener = None
        self._humidity_listener = None

        _LOGGER.debug("Climate entity initialized: %s (ID: %s)", name, dev_id)

    async def async_added_to_hass(self):
        """Run when entity about to be added to hass."""
        await super().async_added_to_hass()
        await self._restore_state()
        await self._setup_sensor_listeners()

    async def _setup_sensor_listeners(self):
        """Track the optional room temperature and humidity sensors."""
        if self._temperature_sensor:
            @callback
            def async_temperature_sensor_listener(evt):
                self._current_temperature = _parse_sensor_state(evt.data.get("new_state"))
                _LOGGER.debug("Temperature sensor updated: %s°C", self._current_temperature)
                self.async_write_ha_state()

            self._temp_listener = event.async_track_state_change_event(
                self.hass, [self._temperature_sensor], async_temperature_sensor_listener
            )
            self._current_temperature = _parse_sensor_state(self.hass.states.get(self._temperature_sensor))

        if self._humidity_sensor:
            @callback
            def async_humidity_sensor_listener(evt):
                self._current_humidity = _parse_sensor_state(evt.data.get("new_state"))
                _LOGGER.debug("Humidity sensor updated: %s%%", self._current_humidity)
                self.async_write_ha_state()

            self._humidity_listener = event.async_track_state_change_event(
                self.hass, [self._humidity_sensor], async_humidity_sensor_listener
            )
            self._current_humidity = _parse_sensor_state(self.hass.states.get(self._humidity_sensor))

        _LOGGER.debug("Sensor listeners setup completed - Temp: %s, Humidity: %s",
                     self._temperature_sensor, self._humidity_sensor)

    async def _restore_state(self):
        """Restore previous state."""
        old_state = await self.async_get_last_state()
        if old_state is None:
            _LOGGER.debug("No previous state found for %s, using defaults", self.name)
            return

        if old_state.state in HVAC_MODE_MAPPING:
            self._hvac_mode = old_state.state
            self._hvac_action = _hvac_action_for(self._hvac_mode)

        attrs = old_state.attributes or {}
        if attrs.get(ATTR_TEMPERATURE) is not None:
            self._target_temperature = attrs[ATTR_TEMPERATURE]
        if attrs.get("fan_mode") in self._protocol.supported_fan_modes:
            self._fan_mode = attrs["fan_mode"]

        _LOGGER.info("Restored state for %s: mode=%s, temp=%s, fan=%s",
                    self.name, self._hvac_mode, self._target_temperature, self._fan_mode)

    async def async_will_remove_from_hass(self):
        """Clean up when entity is removed."""
        if self._temp_listener:
            self._temp_listener()
        if self._humidity_listener:
            self._humidity_listener()

        await self.hass.async_add_executor_job(self._deinit_device)
        await super().async_will_remove_from_hass()

    def _init_device(self):
        if self._device:
            return

        _LOGGER.debug("Initializing device %s with version %s", self._dev_id, self._protocol_version)
        try:
            self._device = Contrib.IRRemoteControlDevice(
                dev_id=self._dev_id,
                address=self._address,
                local_key=self._local_key,
                version=self._protocol_version,
                persist=True,
                connection_timeout=10,
                connection_retry_limit=3
            )
            _LOGGER.debug("IRRemoteControlDevice initialized successfully")

        except Exception as e:
            _LOGGER.warning("IRRemoteControlDevice failed, trying fallback: %s", e)
            self._device = Device(
                self._dev_id,
                self._address,
                self._local_key,
                version=self._protocol_version,
                connection_timeout=10,
                connection_retry_limit=3
            )
            _LOGGER.debug("Fallback Device initialized successfully")

    def _deinit_device(self):
        if self._device:
            try:
                self._device.close()
            except Exception as e:
                _LOGGER.debug("Error closing device %s: %s", self._dev_id, e)
            finally:
                self._device = None

    def _ensure_connection(self):
        """Ensure device connection is active"""
        if not self._device:
            self._init_device()
            return self._device is not None

        try:
            self._device.status()
            return True
        except Exception as e:
            _LOGGER.debug("Connection lost, reinitializing: %s", e)
            self._deinit_device()
            self._init_device()
            return self._device is not None

    def _update_availability(self):
        with self._lock:
            try:
                if not self._ensure_connection():
                    self._available = False
                    return

                status = self._device.status()
                self._available = status is not None
                _LOGGER.debug("Device %s available: %s", self._dev_id, self._available)

            except Exception as e:
                self._available = False
                _LOGGER.debug("Availability check failed for %s: %s", self._dev_id, e)
                self._deinit_device()

    def _send_ir_command_sync(self, pulses):
        """Sync version of IR command sending"""
        with self._lock:
            try:
                if not self._ensure_connection():
                    raise HomeAssistantError("Cannot establish connection to device")

                _LOGGER.debug("Sending IR command with %d pulses", len(pulses))

                if hasattr(self._device, 'send_button'):
                    b64 = Contrib.IRRemoteControlDevice.pulses_to_base64(pulses)
                    result = self._device.send_button(b64)
                else:
                    pulse_str = ','.join(map(str, pulses))
                    b64 = base64.b64encode(pulse_str.encode()).decode()
                    result = self._device.set_value(IR_SEND_DPS, b64)

                if result and "Error" in result:
                    raise HomeAssistantError(f"Tuya device error: {result}")

                _LOGGER.debug("IR command sent successfully")
                return True

            except Exception as e:
                self._deinit_device()
                _LOGGER.error("Failed to send IR command: %s", e)
                raise HomeAssistantError(f"Failed to send IR command: {e}") from e

    async def _send_ir_command(self, pulses):
        """Send IR command to device - async version"""
        try:
            await self.hass.async_add_executor_job(self._send_ir_command_sync, pulses)
            self._available = True
        except HomeAssistantError:
            self._available = False
            raise

    @property
    def name(self):
        """Return the name of the climate device."""
        return self._attr_name

    @property
    def available(self):
        return self._available

    @property
    def unique_id(self):
        return f"{DOMAIN}_{self._dev_id}"

    @property
    def temperature_unit(self):
        return UnitOfTemperature.CELSIUS

    @property
    def current_temperature(self):
        return self._current_temperature

    @property
    def current_humidity(self):
        """Return the current humidity."""
        return self._current_humidity

    @property
    def target_temperature(self):
        return self._target_temperature

    @property
    def target_temperature_step(self):
        return self._protocol.temperature_step

    @property
    def min_temp(self):
        return self._protocol.temperature_min

    @property
    def max_temp(self):
        return self._protocol.temperature_max

    @property
    def hvac_mode(self):
        return HVAC_MODE_MAPPING.get(self._hvac_mode, HVACMode.OFF)

    @property
    def hvac_action(self):
        return HVAC_ACTION_MAPPING.get(self._hvac_action, HVACAction.OFF)

    @property
    def hvac_modes(self):
        return [HVAC_MODE_MAPPING[mode] for mode in self._protocol.supported_hvac_modes]

    @property
    def fan_mode(self):
        return self._fan_mode

    @property
    def fan_modes(self):
        return self._protocol.supported_fan_modes

    @property
    def supported_features(self):
        return (ClimateEntityFeature.TARGET_TEMPERATURE |
                ClimateEntityFeature.FAN_MODE |
                ClimateEntityFeature.TURN_ON |
                ClimateEntityFeature.TURN_OFF)

    @property
    def extra_state_attributes(self):
        """Return entity specific state attributes."""
        attrs = {}

        if self._temperature_sensor:
            attrs["temperature_sensor"] = self._temperature_sensor
        if self._humidity_sensor:
            attrs["humidity_sensor"] = self._humidity_sensor
        if self._last_signal is not None:
            attrs["last_signal"] = format_signal(self._last_signal)

        return attrs

    @property
    def device_info(self):
        """Return device information."""
        return DeviceInfo(
            identifiers={(DOMAIN, self._dev_id)},
            name=self._attr_name,
            manufacturer="Voltas",
            model="IR Climate Controller (Tuya IR blaster)",
            sw_version=f"Protocol {self._protocol_version}",
        )

    def status(self):
        """Room sensor readings and the current AC settings."""
        return {
            "roomTemp": self._current_temperature,
            "humidity": self._current_humidity,
            "hvac_mode": self._hvac_mode,
            "target_temp": self._target_temperature,
            "fan_mode": self._fan_mode,
        }

    async def async_set_temperature(self, **kwargs):
        """Set new target temperature."""
        if ATTR_TEMPERATURE in kwargs:
            self._target_temperature = kwargs[ATTR_TEMPERATURE]
            _LOGGER.debug("Setting temperature to %s", self._target_temperature)
            await self._send_climate_command()
        self.async_write_ha_state()

    async def async_set_hvac_mode(self, hvac_mode):
        """Set new target hvac mode."""
        hvac_mode_str = hvac_mode.value if hasattr(hvac_mode, 'value') else str(hvac_mode)

        _LOGGER.debug("Setting HVAC mode from %s to %s", self._hvac_mode, hvac_mode_str)
        self._hvac_mode = hvac_mode_str
        self._hvac_action = _hvac_action_for(hvac_mode_str)

        await self._send_climate_command()
        self.async_write_ha_state()

    async def async_set_fan_mode(self, fan_mode):
        """Set new target fan mode."""
        self._fan_mode = fan_mode.value if hasattr(fan_mode, 'value') else str(fan_mode)

        _LOGGER.debug("Setting fan mode to %s", self._fan_mode)
        await self._send_climate_command()
        self.async_write_ha_state()

    async def async_turn_on(self):
        """Turn on in cool mode; the remote has no resume code."""
        await self.async_set_hvac_mode("cool")

    async def async_turn_off(self):
        await self.async_set_hvac_mode("off")

    async def async_send_request(self, request):
        """Send a command request received outside the climate services."""
        if request.power is Power.ON:
            self._hvac_mode = REQUEST_MODE_TO_HVAC[request.mode]
            self._target_temperature = clamp_temperature(request.target_temp)
            if request.mode is Mode.COOL:
                self._fan_mode = request.fan_speed.value.lower()
            else:
                self._fan_mode = FanSpeed.DEFAULT.value.lower()
        else:
            self._hvac_mode = "off"
        self._hvac_action = _hvac_action_for(self._hvac_mode)

        signal = await self._transmit(request)
        self.async_write_ha_state()
        return signal

    async def _send_climate_command(self):
        """Send the current entity state to the device."""
        request = self._protocol.build_request(self._hvac_mode, self._target_temperature, self._fan_mode)
        return await self._transmit(request)

    async def _transmit(self, request):
        signal = self._protocol.generate_signal(request)
        _LOGGER.info("Sending Voltas signal to %s: %s", self._dev_id, format_signal(signal))
        await self._send_ir_command(self._protocol.encode_pulses(signal))
        self._last_signal = signal
        return signal

    async def async_update(self):
        """Update device state."""
        await self.hass.async_add_executor_job(self._update_availability)
