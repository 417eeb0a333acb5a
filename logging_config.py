"""
Logging configuration for the club booking services
Console output plus rotating files, with a dedicated log for booking activity
"""

import logging
import logging.handlers
import os
from datetime import datetime
from typing import Optional

from infrastructure.settings import AppSettings, get_settings

# Loggers whose records also go to the dedicated reservations log
BOOKING_LOGGERS = (
    'DocumentStore',
    'ReservationManager',
    'MatchManager',
    'PaymentService',
)

SERVICE_LOGGERS = BOOKING_LOGGERS + (
    'PlayerStatsUpdater',
    'NotificationService',
    'UserManager',
    'AdminDashboard',
)


def setup_logging(settings: Optional[AppSettings] = None) -> str:
    """
    Set up console and rotating file handlers.

    Production mode keeps only warnings on the console and main log; booking
    activity is still recorded at INFO in the reservations log.

    Returns:
        The directory the log files are written to
    """
    settings = settings or get_settings()
    production = settings.production_mode
    log_dir = settings.log_directory
    os.makedirs(log_dir, exist_ok=True)

    main_log_file = os.path.join(log_dir, 'club.log')
    error_log_file = os.path.join(log_dir, 'club_errors.log')
    reservations_log_file = os.path.join(log_dir, 'reservations.log')

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.WARNING if production else logging.DEBUG)
    root_logger.handlers = []

    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d in %(funcName)s()] - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING if production else logging.INFO)
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    main_file_handler = logging.handlers.RotatingFileHandler(
        main_log_file,
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    main_file_handler.setLevel(logging.WARNING if production else logging.INFO)
    main_file_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(main_file_handler)

    error_file_handler = logging.handlers.RotatingFileHandler(
        error_log_file,
        maxBytes=5*1024*1024,  # 5MB
        backupCount=5,
        encoding='utf-8'
    )
    error_file_handler.setLevel(logging.ERROR)
    error_file_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(error_file_handler)

    reservations_handler = logging.handlers.RotatingFileHandler(
        reservations_log_file,
        maxBytes=20*1024*1024,  # 20MB
        backupCount=5,
        encoding='utf-8'
    )
    reservations_handler.setLevel(logging.INFO if production else logging.DEBUG)
    reservations_handler.setFormatter(detailed_formatter)

    for name in BOOKING_LOGGERS:
        logger = logging.getLogger(name)
        logger.handlers = [reservations_handler]

    for name in SERVICE_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO if production else logging.DEBUG)

    root_logger.info("=" * 80)
    root_logger.info(f"{settings.club_name} logging initialized - {datetime.now()}")
    root_logger.info(f"Production Mode: {'ON' if production else 'OFF'}")
    root_logger.info(f"Main log: {main_log_file}")
    root_logger.info(f"Error log: {error_log_file}")
    root_logger.info(f"Reservations log: {reservations_log_file}")
    root_logger.info("=" * 80)
    return log_dir


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name

    Args:
        name: Logger name (usually a component class name)

    Returns:
        logging.Logger instance
    """
    return logging.getLogger(name)
