"""Logging configuration for the EDV server.

Besides the one-time handler setup, this module understands "log specs":
colon-separated strings of the form

    module1=level1:module2=level2:defaultlevel

where each module is a logger below the ``edv`` namespace (``storage`` means
``edv.storage``) and the optional bare level applies to ``edv`` itself.
Valid levels are critical, error, warn, info and debug.
"""

import logging
import sys

from edv.config import settings

ROOT_LOGGER_NAME = "edv"

_LEVELS_BY_NAME = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

_NAMES_BY_LEVEL = {
    logging.CRITICAL: "critical",
    logging.ERROR: "error",
    logging.WARNING: "warn",
    logging.INFO: "info",
    logging.DEBUG: "debug",
}


def setup_logging() -> None:
    """Configure logging for the application.

    Uses DEBUG level if settings.debug is True, otherwise settings.log_level.
    """
    if settings.debug:
        level = logging.DEBUG
    else:
        level = parse_level(settings.log_level)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)

    # Avoid adding multiple handlers if called multiple times
    if root_logger.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)

    # Format: timestamp - level - logger - message
    formatter = logging.Formatter(
        fmt="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    handler.setFormatter(formatter)

    root_logger.addHandler(handler)


def parse_level(name: str) -> int:
    """Map a level name to a logging level. Raises ValueError if unknown."""
    try:
        return _LEVELS_BY_NAME[name.strip().lower()]
    except KeyError:
        raise ValueError(f"Invalid log level '{name}'") from None


def parse_log_spec(spec: str) -> tuple[int | None, dict[str, int]]:
    """Parse a log spec into (default level or None, {module: level}).

    Raises ValueError for unknown levels or more than one default level.
    Module names must not contain '='.
    """
    default_level: int | None = None
    module_levels: dict[str, int] = {}

    for part in spec.split(":"):
        if "=" in part:
            module, _, level_name = part.partition("=")
            if not module:
                raise ValueError("Log spec contains an empty module name")
            module_levels[module] = parse_level(level_name)
        else:
            if default_level is not None:
                raise ValueError("Log spec contains more than one default level")
            default_level = parse_level(part)

    return default_level, module_levels


def apply_log_spec(spec: str) -> None:
    """Parse and apply a log spec. Nothing is changed if the spec is invalid."""
    default_level, module_levels = parse_log_spec(spec)

    if default_level is not None:
        logging.getLogger(ROOT_LOGGER_NAME).setLevel(default_level)

    for module, level in module_levels.items():
        logging.getLogger(_logger_name(module)).setLevel(level)


def current_log_spec() -> str:
    """Render the current levels of the edv loggers as a log spec."""
    prefix = ROOT_LOGGER_NAME + "."
    parts = []
    for name, logger in sorted(logging.root.manager.loggerDict.items()):
        if not name.startswith(prefix) or not isinstance(logger, logging.Logger):
            continue
        if logger.level == logging.NOTSET:
            continue
        parts.append(f"{name[len(prefix):]}={level_name(logger.level)}")

    parts.append(level_name(logging.getLogger(ROOT_LOGGER_NAME).getEffectiveLevel()))
    return ":".join(parts)


def level_name(level: int) -> str:
    return _NAMES_BY_LEVEL.get(level, logging.getLevelName(level).lower())


def _logger_name(module: str) -> str:
    if module == ROOT_LOGGER_NAME or module.startswith(ROOT_LOGGER_NAME + "."):
        return module
    return f"{ROOT_LOGGER_NAME}.{module}"
