"""Application constants."""

USER_AGENT = "citytown/0.3 (+location-records)"
UNKNOWN_CITY_NAME = "未知縣市"
UNKNOWN_TOWNSHIP_NAME = "未知鄉鎮"
DEFAULT_CITIES_PATH = "city.json"
DEFAULT_TOWNSHIPS_PATH = "township.json"
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 10
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "session_id",
    "command",
    "event",
    "status",
    "city_id",
    "township_id",
    "record_id",
    "error_code",
    "message",
)
