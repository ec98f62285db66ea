import logging
import logging.config
import yaml
from pathlib import Path
from ..config.settings import settings

DEFAULT_LOGGING_CONFIG_PATH = Path(settings.LOGGING_CONFIG_PATH)


def setup_logging(config_path: Path = DEFAULT_LOGGING_CONFIG_PATH) -> None:
    """
    Set up logging configuration from a YAML file.

    Falls back to ``logging.basicConfig`` when the file is missing or cannot
    be applied.

    Args:
        config_path (Path): Path to the logging configuration YAML file.
    """
    if config_path.exists():
        try:
            with open(config_path, 'rt') as f:
                log_config = yaml.safe_load(f.read())
            logging.config.dictConfig(log_config)
            logging.getLogger(__name__).info(f"Logging configured successfully from {config_path}")
        except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
            logging.basicConfig(level=logging.INFO)  # Basic config as fallback
            logging.error(f"Error loading logging configuration from {config_path}: {e}. Using basicConfig.")
    else:
        logging.basicConfig(level=logging.INFO)
        logging.warning(f"Logging configuration file not found at {config_path}. Using basicConfig.")

# Called explicitly from the application lifespan:
# from contact_api.utils.logging_utils import setup_logging
# setup_logging()
