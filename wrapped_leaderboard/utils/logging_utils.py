import logging
import logging.config
from pathlib import Path
from typing import Optional

import yaml

from ..config.settings import settings

DEFAULT_LOGGING_CONFIG_PATH = Path(settings.LOGGING_CONFIG_PATH)
SERVICE_LOGGER_NAME = "wrapped_leaderboard"

logger = logging.getLogger(__name__)


def setup_logging(config_path: Path = DEFAULT_LOGGING_CONFIG_PATH, debug: Optional[bool] = None) -> None:
    """
    Configure logging from the service's YAML dictConfig file.

    Falls back to ``basicConfig`` when the file is missing or invalid. In
    debug mode the service logger is lowered to DEBUG after loading.

    Args:
        config_path: Path to the logging configuration YAML file.
        debug: Overrides ``settings.DEBUG`` when given.
    """
    debug = settings.DEBUG if debug is None else debug
    fallback_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    if not config_path.exists():
        logging.basicConfig(level=logging.INFO, format=fallback_format)
        logger.warning(f"Logging configuration file not found at {config_path}. Using basicConfig.")
    else:
        try:
            with open(config_path, "rt") as f:
                log_config = yaml.safe_load(f.read())
            logging.config.dictConfig(log_config)
            logger.info(f"Logging configured from {config_path}")
        except (OSError, yaml.YAMLError, ValueError, TypeError) as e:
            logging.basicConfig(level=logging.INFO, format=fallback_format)
            logger.error(f"Error loading logging configuration from {config_path}: {e}. Using basicConfig.")

    if debug:
        logging.getLogger(SERVICE_LOGGER_NAME).setLevel(logging.DEBUG)
