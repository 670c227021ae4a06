from pathlib import Path


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent

# Log directory
LOG_DIR = BASE_DIR / 'logs'

# Lua scripts used by the Kvrocks reservation ledger
LEDGER_LUA_SCRIPT_DIR = (
    BASE_DIR / 'src' / 'service' / 'reservation' / 'driven_adapter' / 'state' / 'lua_script'
)

# Lua scripts used by the Kvrocks booking repository
BOOKING_LUA_SCRIPT_DIR = (
    BASE_DIR / 'src' / 'service' / 'ticketing' / 'driven_adapter' / 'repo' / 'lua_script'
)
