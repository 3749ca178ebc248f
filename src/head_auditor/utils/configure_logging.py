import logging
import sys
from tqdm import tqdm

from .config_loader import get_nested_config


class LogWithTqdm(logging.Handler):
    """
    A custom logging handler that redirects logging output to `tqdm.write()`,
    ensuring that log messages do not interfere with the batch progress bar.
    """
    def emit(self, record):
        try:
            msg = self.format(record)
            tqdm.write(msg, file=sys.stderr)
            self.flush()
        except Exception:
            self.handleError(record)


def _to_level(level, fallback: int) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), fallback)
    return level if isinstance(level, int) else fallback


def configure_logger(general_level=None, module_specific_levels=None, silenced_loggers=None):
    """
    Configures the root logger and specific module loggers with a
    TQDM-friendly handler. Arguments left as None fall back to the
    'logging' section of settings.json.
    """
    if general_level is None:
        general_level = get_nested_config("logging.level", "WARNING")
    if module_specific_levels is None:
        module_specific_levels = get_nested_config("logging.modules", {})
    if silenced_loggers is None:
        silenced_loggers = get_nested_config("logging.silenced", {})

    tqdm_aware_handler = LogWithTqdm()
    formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s"
    )
    tqdm_aware_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(_to_level(general_level, logging.INFO))
    root_logger.handlers.clear()
    root_logger.addHandler(tqdm_aware_handler)

    for name, level in module_specific_levels.items():
        logging.getLogger(name).setLevel(_to_level(level, logging.INFO))

    # Muzzle noisy loggers by setting their level high.
    for name, level in silenced_loggers.items():
        logging.getLogger(name).setLevel(_to_level(level, logging.CRITICAL))
