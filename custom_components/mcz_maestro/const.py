"""Constants for the MCZ Maestro integration.

This module contains the constants used throughout the integration,
including API endpoints, transport timeouts, configuration keys, sensor
names and the static sensor identifier tables.
"""

DOMAIN = "mcz_maestro"

BASE_URL_HLAPI = "https://s.maestro.mcz.it/hlapi/v1.0"
BASE_URL_MCZ = "https://s.maestro.mcz.it/mcz/v1.0"
TENANT_ID = "7c201fd8-42bd-4333-914d-0f5822070757"

ENDPOINT_LOGIN = "/Authorization/Login"
ENDPOINT_APPLIANCE_LIST = "/Nav/FirstVisibleObjectsPaginated"
ENDPOINT_MODEL = "/Model"
ENDPOINT_APPLIANCE = "/Appliance"
ENDPOINT_ACTIVATE_PROGRAM = "/Program/ActivateProgram"
ENDPOINT_PING = "/Program/Ping"

HEADER_TENANT = "tenantid"
HEADER_TOKEN = "auth-token"

HTTP_TIMEOUT = 30.0

LOCAL_PORT = 81
LOCAL_CONNECT_TIMEOUT = 10  # Seconds
LOCAL_MESSAGE_TIMEOUT = 30  # Seconds

LEGACY_SOCKET_URL = "http://app.mcz.it:9000"
LEGACY_CONNECT_TIMEOUT = 10  # Seconds
LEGACY_READ_TIMEOUT = 5  # Seconds
LEGACY_RECONNECT_ATTEMPTS = 5
LEGACY_RECONNECT_DELAY = 1
LEGACY_RECONNECT_DELAY_MAX = 5
LEGACY_CLIENT_TYPE = "Android-App"
LEGACY_EVENT_JOIN = "join"
LEGACY_EVENT_JOINED = "joined"
LEGACY_EVENT_REQUEST = "chiedo"
LEGACY_EVENT_BROADCAST = "rispondo"
LEGACY_CALL_TYPE = 1
LEGACY_STATUS_REQUEST = "C|RecuperoInfo"
LEGACY_STATE_REQUEST = "RecuperoParametri"
LEGACY_WRITE_PREFIX = "C|WriteParametri"

SSID_FIELD = "SSID_wifi"
SSID_MAC_PREFIX = "MCZ-"

DEFAULT_SCAN_INTERVAL = 30  # Seconds
RECONCILE_DELAY = 3  # Seconds to let the stove apply a command before re-reading

ERROR_INVALID_AUTH = "invalid_auth"
ERROR_CANNOT_CONNECT = "cannot_connect"
ERROR_TIMEOUT = "timeout_error"
ERROR_API_ERROR = "api_error"
ERROR_NO_APPLIANCES = "no_appliances"
ERROR_UNKNOWN = "unknown_error"

CONF_APPLIANCE_ID = "appliance_id"
CONF_APPLIANCE_NAME = "appliance_name"
CONF_SERIAL_NUMBER = "serial_number"
CONF_MODEL_ID = "model_id"
CONF_SENSOR_SET_TYPE_ID = "sensor_set_type_id"
CONF_MAC_ADDRESS = "mac_address"
CONF_CLOUD_TELEMETRY = "cloud_telemetry"

# Sensor names as exposed by the Maestro model descriptions
SENSOR_POWER = "stato_stufa"
SENSOR_POWER_COMMAND = "com_on_off"
SENSOR_ALARM = "allarme"
SENSOR_TEMP_AMBIENT = "temp_ambiente"
SENSOR_TEMP_AMBIENT_INSTALL = "temp_amb_install"
SENSOR_TEMP_EXHAUST = "temp_fumi"
SENSOR_TEMP_WATER = "temp_acqua"
SENSOR_SET_TEMP_AMB1 = "set_amb1"
SENSOR_MODE = "mode"
SENSOR_FAN1 = "fan1"
SENSOR_FAN2 = "fan2"
SENSOR_FAN3 = "fan3"
SENSOR_POWER_LEVEL = "pot"
SENSOR_ECO_START = "eco_start"
SENSOR_ECO_STOP = "eco_stop"

POWER_ON_VALUE = 1
POWER_OFF_VALUE = 40  # The firmware ignores 0 as an off command

STOVE_PHASES = {
    0: "off",
    1: "starting",
    2: "preheating",
    3: "ignition",
    4: "heating",
    5: "cleaning",
    6: "standby",
    7: "alarm",
    8: "turning_off",
}

THERMOSTAT_MODE_MAP = {
    "manual": 0,
    "auto": 1,
    "dynamic": 2,
    "turbo": 3,
}
THERMOSTAT_MODE_REVERSE_MAP = {value: key for key, value in THERMOSTAT_MODE_MAP.items()}

FAN_SPEED_MIN = 0
FAN_SPEED_MAX = 6
POWER_LEVEL_MIN = 1
POWER_LEVEL_MAX = 5

# First generation stoves addressed through the Socket.IO gateway
LEGACY_SENSOR_IDS = {
    SENSOR_POWER_COMMAND: 34,
    SENSOR_SET_TEMP_AMB1: 35,
    SENSOR_POWER_LEVEL: 36,
    SENSOR_FAN1: 37,
    SENSOR_FAN2: 38,
    SENSOR_FAN3: 39,
    SENSOR_MODE: 59,
    SENSOR_ECO_START: 60,
    SENSOR_ECO_STOP: 60,
}

# Register numbers of the stove's own WebSocket server
LOCAL_SENSOR_IDS = {
    SENSOR_POWER_COMMAND: 34,
    SENSOR_MODE: 35,
    SENSOR_POWER_LEVEL: 36,
    SENSOR_FAN1: 37,
    SENSOR_FAN2: 38,
    SENSOR_FAN3: 39,
    SENSOR_ECO_START: 41,
    SENSOR_ECO_STOP: 41,
    SENSOR_SET_TEMP_AMB1: 42,
}
