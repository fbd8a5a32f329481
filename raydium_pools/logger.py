import logging
import os
from logging.handlers import RotatingFileHandler
import json
from datetime import datetime
from typing import Dict, Any, Optional
from raydium_pools.config import LOGGING_CONFIG


def setup_logger(name: str = 'raydium_pools', log_file: Optional[str] = None) -> logging.Logger:
    """Configure and return a logger instance with rotating file handler"""
    logger = logging.getLogger(name)
    logger.setLevel(LOGGING_CONFIG['level'])

    # Already configured
    if logger.handlers:
        return logger

    log_file = log_file or LOGGING_CONFIG['message_log_file']
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    # Create rotating file handler
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=LOGGING_CONFIG['max_log_size_mb'] * 1024 * 1024,
        backupCount=LOGGING_CONFIG['backup_count']
    )

    # Create console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)

    # Create formatters and add them to handlers
    file_formatter = logging.Formatter(
        '[%(asctime)s] %(levelname)s %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_formatter = logging.Formatter('%(message)s')

    file_handler.setFormatter(file_formatter)
    console_handler.setFormatter(console_formatter)

    # Add handlers to logger
    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger


def log_message(logger: logging.Logger, message_type: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """Log a structured event as a single JSON line

    Args:
        logger: The logger instance to use
        message_type: Type of message being logged
        data: Dictionary containing the message data

    Returns:
        The entry that was written
    """
    log_entry = {
        'timestamp': datetime.now().isoformat(),
        'type': message_type,
        'data': data
    }
    logger.info(json.dumps(log_entry, default=str))
    return log_entry
