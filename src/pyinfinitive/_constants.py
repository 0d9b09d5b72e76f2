"""Internal constants shared across the library."""

BASE_URL = "http://localhost:8080"
USER_AGENT = "pyinfinitive"
DEFAULT_ZONE = 1

WS_PATH = "/api/ws"
AIR_HANDLER_PATH = "/api/airhandler"
HEAT_PUMP_PATH = "/api/heatpump"


def zone_config_path(zone: int) -> str:
    """Path of the per-zone configuration document."""
    return f"/api/zone/{zone}/config"


def zone_vacation_path(zone: int) -> str:
    """Path of the per-zone vacation document."""
    return f"/api/zone/{zone}/vacation"


TSTAT_SETTINGS_PATH = "/api/tstat/settings"


def raw_table_path(device: str, table: str) -> str:
    """Path of a raw table read; *device* and *table* are lowercase hex."""
    return f"/api/raw/{device}/{table}"
