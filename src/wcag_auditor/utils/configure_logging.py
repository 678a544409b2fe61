# src/wcag_auditor/utils/configure_logging.py
import logging
import sys
from typing import Dict, Optional, Union

from tqdm import tqdm

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s"


class LogWithTqdm(logging.Handler):
    """
    Logging handler that writes through `tqdm.write()` so log lines do not
    tear the rule progress bar.
    """
    def emit(self, record):
        try:
            msg = self.format(record)
            tqdm.write(msg, file=sys.stderr)
            self.flush()
        except Exception:
            self.handleError(record)


def _to_level(level: Union[str, int, None], default: int) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), default)
    return level if isinstance(level, int) else default


def configure_logger(
        general_level: Union[str, int, None] = 'INFO',
        module_specific_levels: Optional[Dict[str, Union[str, int]]] = None
) -> None:
    """Installs the tqdm-aware handler on the root logger."""
    handler = LogWithTqdm()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(_to_level(general_level, logging.INFO))
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name, level in (module_specific_levels or {}).items():
        logging.getLogger(name).setLevel(_to_level(level, logging.INFO))
