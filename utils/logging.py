import logging
import os
from typing import Any, Dict, Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(config: Optional[Dict[str, Any]] = None) -> None:
    log_cfg = (config or {}).get("logging", {})
    level = getattr(logging, str(log_cfg.get("level", "INFO")).upper(), logging.INFO)
    fmt = log_cfg.get("format", DEFAULT_FORMAT)
    file_path = log_cfg.get("file_path")

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    file_error = None
    if file_path:
        try:
            os.makedirs(os.path.dirname(file_path) or ".", exist_ok=True)
            handlers.append(logging.FileHandler(file_path))
        except OSError as e:
            file_error = e

    logging.basicConfig(level=level, format=fmt, handlers=handlers, force=True)
    if file_error is not None:
        logging.getLogger(__name__).warning("File logging disabled (%s): %s", file_path, file_error)
