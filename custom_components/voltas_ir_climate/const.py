# const.py
"""Constants for the Voltas IR Climate integration."""

DOMAIN = "voltas_ir_climate"
DEFAULT_FRIENDLY_NAME = "Voltas IR Climate"

CONF_LOCAL_KEY = "local_key"
CONF_PROTOCOL_VERSION = "protocol_version"
CONF_TEMPERATURE_SENSOR = "temperature_sensor"
CONF_HUMIDITY_SENSOR = "humidity_sensor"

DEFAULT_CLIMATE_BRAND = "voltas"

TUYA_VERSIONS = [3.3, 3.4, 3.5, 3.2, 3.1]

# Tuya DPS used for raw IR when IRRemoteControlDevice is unavailable
IR_SEND_DPS = "201"

WS_TYPE_AC_CONTROL = f"{DOMAIN}/ac_control"
WS_TYPE_STATUS = f"{DOMAIN}/status"
