import logging
import sys

from pythonjsonlogger.json import JsonFormatter

from secret_santa.core import environs

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = None, json_format: bool = None) -> None:
    """
    Installs a single stdout handler on the root logger

    :param level: log level name, defaults to SANTA_LOG_LEVEL
    :param json_format: JSON records when true, defaults to SANTA_LOG_JSON
    """
    level_name = (level or environs.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    if json_format is None:
        json_format = environs.LOG_JSON

    root = logging.getLogger()
    root.setLevel(log_level)

    # clear handlers if reloaded
    root.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    if json_format:
        formatter = JsonFormatter(
            LOG_FORMAT,
            rename_fields={"levelname": "level", "name": "logger"},
        )
    else:
        formatter = logging.Formatter(LOG_FORMAT)
    handler.setFormatter(formatter)
    root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(log_level)
    logging.getLogger("uvicorn.error").setLevel(log_level)
