import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional, Union

_HANDLER_MARKER = "_doctoral_credits_handler"


def setup_logging(
    app_name: str = "doctoral-credits",
    log_dir: Optional[Union[str, Path]] = None,
    level: Union[int, str] = logging.INFO,
) -> None:
    """Configure application logging

    Streamlit re-executes the app script on every interaction, so handlers
    installed by a previous run are detected and not added twice.

    Args:
        app_name: Name to use for log files
        log_dir: Directory for log files; console only when None
        level: Root logger level

    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if any(getattr(h, _HANDLER_MARKER, False) for h in root_logger.handlers):
        return

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    setattr(console_handler, _HANDLER_MARKER, True)
    root_logger.addHandler(console_handler)

    if log_dir is None:
        return

    log_dir = Path(log_dir).expanduser()
    os.makedirs(log_dir, exist_ok=True)

    # File handler with rotation
    file_handler = logging.handlers.RotatingFileHandler(
        filename=log_dir / f"{app_name}.log",
        maxBytes=5_000_000,  # 5MB
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    setattr(file_handler, _HANDLER_MARKER, True)
    root_logger.addHandler(file_handler)

    # Errors also go to their own file
    error_handler = logging.handlers.RotatingFileHandler(
        filename=log_dir / f"{app_name}-error.log",
        maxBytes=5_000_000,  # 5MB
        backupCount=3,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)
    setattr(error_handler, _HANDLER_MARKER, True)
    root_logger.addHandler(error_handler)
