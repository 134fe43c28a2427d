"""
Logging configuration for the catalog service.
"""
import os
import logging
from datetime import datetime
import threading

# Track if logging has been initialized
_logging_initialized = False
_logging_lock = threading.Lock()


def setup_logging(log_level=logging.INFO, log_dir=None):
    """
    Set up logging configuration.
    
    Args:
        log_level: Logging level (default: INFO)
        log_dir: Directory for log files (default: LOG_DIR env var or "logs").
                 Pass an empty string to log to the console only.
    
    Returns:
        logging.Logger: Configured logger
    """
    global _logging_initialized
    
    # Use lock to prevent race conditions when multiple threads try to initialize logging
    with _logging_lock:
        if _logging_initialized:
            return logging.getLogger()
        
        if log_dir is None:
            log_dir = os.environ.get("LOG_DIR", "logs")
        
        # Configure root logger
        logger = logging.getLogger()
        logger.setLevel(log_level)
        
        # Clear any existing handlers
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        
        # Console output goes to stderr so CLI JSON on stdout stays clean
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)
        
        log_file = None
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_file = os.path.join(log_dir, f"catalog_service_{timestamp}.log")
            
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        
        logger.info(f"Logging initialized. Log file: {log_file or 'console only'}")
        
        _logging_initialized = True
        
        return logger


def get_logger(name):
    """
    Get a logger for a specific module.
    
    Unlike ``setup_logging`` this never installs handlers, so importing a
    module does not create log files as a side effect.
    
    Args:
        name: Name of the module (typically __name__)
    
    Returns:
        logging.Logger: Logger instance
    """
    return logging.getLogger(name)
