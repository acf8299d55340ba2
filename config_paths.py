import json
import logging
import os

logger = logging.getLogger(__name__)

HOME = os.path.expanduser("~")
XDG_CONFIG_HOME = os.environ.get("XDG_CONFIG_HOME")
CONFIG_HOME = XDG_CONFIG_HOME if XDG_CONFIG_HOME else os.path.join(HOME, ".config")
CONFIG_DIR = os.path.join(CONFIG_HOME, "tablr")
CONFIG_JSON = os.path.join(CONFIG_DIR, "config.json")

# default settings
INITIAL_TABLES_DEFAULT = 0
UNDO_MAX_DEPTH_DEFAULT = None
LOG_LEVEL_DEFAULT = None

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def default_config():
    return {
        "INITIAL_TABLES": INITIAL_TABLES_DEFAULT,
        "UNDO_MAX_DEPTH": UNDO_MAX_DEPTH_DEFAULT,
        "LOG_LEVEL": LOG_LEVEL_DEFAULT,
    }


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def load_config():
    cfg = default_config()

    if not os.path.exists(CONFIG_JSON):
        return cfg

    try:
        with open(CONFIG_JSON, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", CONFIG_JSON, exc)
        return cfg

    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: top level is not an object", CONFIG_JSON)
        return cfg

    initial = data.get("initial_tables")
    if _is_int(initial) and initial >= 0:
        cfg["INITIAL_TABLES"] = initial

    depth = data.get("undo_max_depth")
    if _is_int(depth) and depth > 0:
        cfg["UNDO_MAX_DEPTH"] = depth

    level = data.get("log_level")
    if isinstance(level, str) and level.upper() in _LOG_LEVELS:
        cfg["LOG_LEVEL"] = level.upper()

    return cfg
