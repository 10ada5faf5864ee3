"""
Logging configuration for download runs using structlog.
Console output for humans, optional JSON, and a rotating log file.
"""

import os
import logging
import logging.handlers
from pathlib import Path
from typing import Any, Callable, List, Optional
import structlog

LOG_FILE_NAME = "downloader.log"


class LoggerConfig:
    """
    Centralized logging configuration for the downloader.

    Module loggers go through stdlib logging; run-level events go through
    structlog, which renders into the same handlers.
    """

    def __init__(self, log_dir: str = "logs"):
        """
        Initialize logger configuration.

        Args:
            log_dir: Directory for log files
        """
        self.log_dir = log_dir
        self._configured = False

    @property
    def log_file(self) -> str:
        return os.path.join(self.log_dir, LOG_FILE_NAME)

    def setup(
        self,
        level: str = "INFO",
        json_output: bool = False,
        console_output: bool = True,
        file_output: bool = True,
        max_bytes: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5,
        processors: Optional[List[Callable]] = None
    ) -> Any:
        """
        Set up structlog on top of stdlib logging.

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            json_output: Render structlog events as JSON lines
            console_output: Log to stderr
            file_output: Log to <log_dir>/downloader.log
            max_bytes: Maximum size of log file before rotation
            backup_count: Number of rotated files to keep
            processors: Extra processors run before the standard chain

        Returns:
            Configured structlog logger

        Raises:
            ValueError: If level is not a known log level name
        """
        numeric_level = logging.getLevelName(level.upper())
        if not isinstance(numeric_level, int):
            raise ValueError(f"Unknown log level: {level}")

        processor_chain = list(processors or [])
        processor_chain.extend([
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
        ])

        if json_output:
            processor_chain.append(structlog.processors.JSONRenderer())
        else:
            processor_chain.append(structlog.dev.ConsoleRenderer(colors=False))

        structlog.configure(
            processors=processor_chain,
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=False,
        )

        root_logger = logging.getLogger()
        root_logger.setLevel(numeric_level)
        self._remove_handlers(root_logger)

        if console_output:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(numeric_level)
            console_handler.setFormatter(logging.Formatter(
                '%(message)s' if json_output
                else '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            ))
            root_logger.addHandler(console_handler)

        if file_output:
            Path(self.log_dir).mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                self.log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding='utf-8'
            )
            file_handler.setLevel(numeric_level)
            file_handler.setFormatter(logging.Formatter('%(message)s'))
            root_logger.addHandler(file_handler)

        # Browser driver chatter
        logging.getLogger("asyncio").setLevel(logging.WARNING)
        logging.getLogger("urllib3").setLevel(logging.WARNING)

        self._configured = True
        return structlog.get_logger()

    @staticmethod
    def _remove_handlers(root_logger: logging.Logger):
        for handler in root_logger.handlers[:]:
            handler.close()
            root_logger.removeHandler(handler)

    def reset(self):
        """Reset structlog defaults and drop all root handlers."""
        structlog.reset_defaults()
        self._remove_handlers(logging.getLogger())
        self._configured = False
