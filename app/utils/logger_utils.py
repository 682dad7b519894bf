from loguru import logger
import sys
import os


class LogConfig:
    LOGGING_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
    LOGGING_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level}</level> | <level>{message}</level>"
    LOGS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), "logs")
    LOG_FILE_PATH = os.path.join(LOGS_DIR, "app.log")
    LOG_TO_FILE = os.getenv("LOG_TO_FILE", "true")

    @staticmethod
    def configure_global_logging():
        logger.remove()  # Remove all existing handlers

        # Configure console logging
        logger.add(
            sys.stderr,
            format=LogConfig.LOGGING_FORMAT,
            level=LogConfig.LOGGING_LEVEL,
        )

        # Configure app.log (default) logging
        if LogConfig.LOG_TO_FILE.lower() == "true":
            LogConfig._ensure_logs_dir()
            logger.add(
                LogConfig.LOG_FILE_PATH,
                rotation="10 MB",
                retention="30 days",
                format=LogConfig.LOGGING_FORMAT,
                level=LogConfig.LOGGING_LEVEL,
                mode="a"  # Append mode
            )

    @staticmethod
    def _ensure_logs_dir():
        """Ensure the logs directory exists"""
        os.makedirs(LogConfig.LOGS_DIR, exist_ok=True)


LogConfig.configure_global_logging()
