"""Logging utilities for envprec - console and optional file logging setup."""

import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class PrecedenceLoggingSetup:
    """Configure logging for one envprec run."""

    def __init__(
        self,
        target_name: str,
        log_dir: Optional[str] = None,
        run_id: Optional[str] = None,
        stream: Optional[TextIO] = None,
        quiet: bool = False,
    ):
        self.target_name = target_name
        self.run_id = run_id
        self.stream = stream if stream is not None else sys.stdout
        self.quiet = quiet
        self.log_filepath: Optional[Path] = None

        if log_dir:
            base = Path(log_dir) / run_id if run_id else Path(log_dir)
            safe_name = target_name.replace('/', '_').replace('\\', '_')
            self.log_filepath = base / f"envprec_{safe_name}.log"

        self.setup_python_logging()

    def setup_python_logging(self):
        """Setup Python standard logging to console and, if requested, a file."""
        disable_file_logging = os.environ.get('ENVPREC_DISABLE_FILE_LOGGING', '').lower() in ('1', 'true', 'yes')

        formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)

        # Clear existing handlers to avoid duplicates
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler(self.stream)
        console_handler.setLevel(logging.WARNING if self.quiet else logging.INFO)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        logger = logging.getLogger('envprec.logging')
        if self.log_filepath is None:
            return
        if disable_file_logging:
            logger.info("File logging disabled by ENVPREC_DISABLE_FILE_LOGGING")
            self.log_filepath = None
            return

        try:
            self.log_filepath.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.log_filepath, mode='w', encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            logger.info(f"Logging initialized - log file: {self.log_filepath}")
        except OSError as e:
            # If file logging fails, continue with console only
            logger.warning(f"File logging disabled due to error: {e}")
            self.log_filepath = None

    def log_config(self, settings: Dict[str, Any]):
        """Log the effective run settings."""
        logger = logging.getLogger('envprec.config')
        logger.info("=== Configuration ===")
        logger.info(f"Target: {self.target_name}")
        for key, value in settings.items():
            logger.info(f"{key}: {value}")
        logger.info("=== End Configuration ===")

    def get_log_filepath(self) -> Optional[Path]:
        return self.log_filepath


def setup_logging(
    target_name: str,
    log_dir: Optional[str] = None,
    run_id: Optional[str] = None,
    stream: Optional[TextIO] = None,
    quiet: bool = False,
) -> PrecedenceLoggingSetup:
    """Setup logging for an envprec run."""
    return PrecedenceLoggingSetup(target_name, log_dir, run_id, stream, quiet)
