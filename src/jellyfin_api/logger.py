import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

import colorlog


def setup_logging(logger: Optional[logging.Logger] = None) -> None:
    """Configure logging for applications and scripts using this library.

    The library itself only emits records through module loggers; call this
    once from the host application if it has no logging setup of its own.

    Args:
        logger: Logger to configure (default: the root logger)
    """
    log_level = os.getenv('JELLYFIN_LOG_LEVEL', 'INFO').upper()
    log_file = os.getenv('JELLYFIN_LOG_FILE')
    max_bytes = int(os.getenv('LOG_FILE_MAX_BYTES', '10485760'))  # 10 MB
    backup_count = int(os.getenv('LOG_FILE_BACKUP_COUNT', '5'))

    if logger is None:
        logger = logging.getLogger()
    logger.setLevel(log_level)

    if not logger.hasHandlers():
        console_handler = logging.StreamHandler()
        console_formatter = colorlog.ColoredFormatter(
            "%(log_color)s%(levelname)s:%(name)s:%(message)s",
            log_colors={
                'DEBUG': 'bold_blue',
                'INFO': 'bold_green',
                'WARNING': 'bold_yellow',
                'ERROR': 'bold_red',
                'CRITICAL': 'bold_purple'
            }
        )
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

        if log_file:
            file_handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count)
            file_formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s - (%(filename)s:%(lineno)d)'
            )
            file_handler.setFormatter(file_formatter)
            logger.addHandler(file_handler)

    # httpx logs every request at INFO; keep it quiet unless debugging
    if log_level != 'DEBUG':
        logging.getLogger('httpx').setLevel(logging.WARNING)
