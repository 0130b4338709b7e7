"""
Logging Setup Module

Configures console and rotating file logging for the monitor.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

LOGGER_NAME = 'break_monitor'


def setup_logging(
    log_file: Optional[str] = None,
    log_level: str = "INFO",
    max_log_size_mb: int = 10,
    backup_count: int = 3
) -> logging.Logger:
    """
    Set up logging for the application.
    
    Args:
        log_file: Path to log file (optional)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        max_log_size_mb: Maximum log file size in MB before rotation
        backup_count: Number of backup log files to keep
        
    Returns:
        Configured logger instance
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    
    # Clear any existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
    
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=max_log_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    
    # Prevent propagation to root logger
    logger.propagate = False
    
    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """
    Get a logger instance.
    
    Names outside the package namespace are placed under it so that
    records reach the handlers installed by setup_logging().
    
    Args:
        name: Logger name
        
    Returns:
        Logger instance
    """
    if name != LOGGER_NAME and not name.startswith(LOGGER_NAME + '.'):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)
