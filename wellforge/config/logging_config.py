import logging
import sys
from logging.handlers import RotatingFileHandler
import os
from wellforge.config.settings import settings

def setup_logging(log_dir: str = settings.log_dir, log_level: str = settings.log_level):
    """Configure logging for the pipeline."""
    # Create logs directory if it doesn't exist
    if not os.path.exists(log_dir):
        os.makedirs(log_dir)

    # Create logger
    logger = logging.getLogger("wellforge")
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Repeated setup must not stack handlers
    if logger.handlers:
        return logger

    # Create formatters
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Console handler with UTF-8 encoding
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    if hasattr(console_handler.stream, 'reconfigure'):
        console_handler.stream.reconfigure(encoding='utf-8')
    logger.addHandler(console_handler)

    # File handler with rotation and UTF-8 encoding
    file_handler = RotatingFileHandler(
        os.path.join(log_dir, "wellforge.log"),
        maxBytes=10485760,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger

# Create and configure the logger
_base_logger = setup_logging()
logger = _base_logger
