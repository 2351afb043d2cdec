from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from link_preview.core.config import AppConfig


def configure_logging(config: AppConfig, *, verbose: bool = False, log_to_file: bool = True) -> None:
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)

    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    root.handlers.clear()

    if log_to_file:
        config.paths.app_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            config.paths.log_path,
            maxBytes=2_000_000,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)

    # Console stays quiet unless asked; results go to stdout.
    console = logging.StreamHandler()
    console.setFormatter(fmt)
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.addHandler(console)

    # aiohttp's access/client loggers are noisy at DEBUG.
    logging.getLogger("aiohttp").setLevel(logging.INFO if verbose else logging.WARNING)
