# walk_buddy/config.py

import os

# GPIO (BCM numbering)
TORCH_PIN = int(os.getenv("WALKBUDDY_TORCH_PIN", "21"))
BUZZER_PIN = int(os.getenv("WALKBUDDY_BUZZER_PIN", "23"))

# Strobe
FLASH_SPEED_MIN_SEC = 0.1
FLASH_SPEED_MAX_SEC = 2.0
FLASH_SPEED_DEFAULT_SEC = 0.5
DISPLAY_FLASH_DEFAULT = True

# Panic
ALARM_SOUND_ID = 1005
ALARM_MAX_SECONDS = 30.0
EMERGENCY_MESSAGE = "Emergency! I need help."
MAX_NOTICES = 20

# Settings
SETTINGS_PATH = os.getenv(
    "WALKBUDDY_SETTINGS_PATH",
    os.path.join(os.path.expanduser("~"), ".walk_buddy", "settings.json"),
)
DEFAULT_CONTACT = "1234567890"

# GSM modem (SIMCom style, text mode SMS)
MODEM_PORT = os.getenv("WALKBUDDY_MODEM_PORT", "/dev/ttyS0")
MODEM_BAUDRATE = int(os.getenv("WALKBUDDY_MODEM_BAUDRATE", "115200"))
MODEM_TIMEOUT_SEC = 2.0

# MQTT
MQTT_ENABLED = os.getenv("WALKBUDDY_MQTT_ENABLED", "0") in {"1", "true", "yes"}
MQTT_HOST = os.getenv("WALKBUDDY_MQTT_HOST", "localhost")
MQTT_PORT = int(os.getenv("WALKBUDDY_MQTT_PORT", "1883"))
MQTT_KEEPALIVE_SEC = 30
MQTT_BASE_TOPIC = os.getenv("WALKBUDDY_MQTT_BASE_TOPIC", "walkbuddy").rstrip("/")
MQTT_STATE_INTERVAL_SEC = 0.5

# Web
WEB_HOST = os.getenv("WALKBUDDY_WEB_HOST", "0.0.0.0")
WEB_PORT = int(os.getenv("WALKBUDDY_WEB_PORT", "5000"))
