import logging
import coloredlogs
from typing import Any, List

FALSE_STRINGS = ('', '0', 'false', 'no', 'off', 'null', 'none')


def split_keywords(value: Any) -> List[str]:
    """
    Normalizes a keyword field into a list of non-empty strings.
    Accepts a list or a comma-separated string, the way the editor form submits it.
    """
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(',')
    elif isinstance(value, (list, tuple)):
        items = [item for item in value if item is not None]
    else:
        items = [value]
    return [str(item).strip() for item in items if str(item).strip()]

def coerce_bool(value: Any) -> bool:
    """
    Converts a truthy/falsy document value into a bool.
    Strings such as "false" or "0" count as false.
    """
    if isinstance(value, str):
        return value.strip().lower() not in FALSE_STRINGS
    return bool(value)

def create_logger(name: str, entity_name: str, level=logging.INFO):
    """Creates and configures a logger with colored output."""
    if level == logging.DEBUG:
        fmt=f'[%(asctime)s.%(msecs)03d][%(levelname)s][{entity_name}]: %(message)s'
    else:
        fmt=f'[%(asctime)s][%(levelname)s][{entity_name}]: %(message)s'
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    if not logger.handlers:
        coloredlogs.install(level=level, logger=logger, fmt=fmt)
    return logger
