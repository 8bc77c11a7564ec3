"""
Centralized Logging Configuration for the transaction alert relay

Features:
- Console output (INFO level)
- Daily rotated main log, 30 days kept (DEBUG level)
- Separate error log (rotates at 10MB, keeps 5 files)

Usage:
    from txwatch.monitoring.logging_config import setup_logging

    setup_logging(log_dir='logs/')
"""

import logging
import sys
from pathlib import Path
from logging.handlers import TimedRotatingFileHandler, RotatingFileHandler


MAIN_LOG_NAME = 'relay.log'
ERROR_LOG_NAME = 'errors.log'


def setup_logging(
    log_dir: str = 'logs/',
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    error_log_enabled: bool = True
) -> logging.Logger:
    """
    Setup logging with rotation.

    Args:
        log_dir: Directory for log files (created if doesn't exist)
        console_level: Logging level for console output
        file_level: Logging level for file output
        error_log_enabled: Whether to create separate error log

    Returns:
        Root logger
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    simple_formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture everything, handlers will filter

    # Remove existing handlers to avoid duplicates
    root_logger.handlers = []

    # ========================================================================
    # Console Handler
    # ========================================================================
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(simple_formatter)
    root_logger.addHandler(console_handler)

    # ========================================================================
    # Main Log File Handler (Daily rotation, 30 days retention)
    # ========================================================================
    main_log_file = log_path / MAIN_LOG_NAME

    file_handler = TimedRotatingFileHandler(
        filename=str(main_log_file),
        when='midnight',
        interval=1,
        backupCount=30,
        encoding='utf-8'
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(detailed_formatter)
    file_handler.suffix = "%Y-%m-%d"
    root_logger.addHandler(file_handler)

    # ========================================================================
    # Error Log File Handler (Size-based rotation, 10MB, 5 backups)
    # ========================================================================
    if error_log_enabled:
        error_log_file = log_path / ERROR_LOG_NAME

        error_handler = RotatingFileHandler(
            filename=str(error_log_file),
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(error_handler)

    # websockets logs every frame at DEBUG
    logging.getLogger('websockets').setLevel(logging.INFO)

    root_logger.info("=" * 70)
    root_logger.info("Transaction Alert Relay - Logging Initialized")
    root_logger.info(f"Log Directory: {log_path.absolute()}")
    root_logger.info(f"Console Level: {logging.getLevelName(console_level)}")
    root_logger.info(f"File Level: {logging.getLevelName(file_level)}")
    root_logger.info("=" * 70)

    return root_logger
