"""
Centralized logging configuration.

Every module logs through the standard library logger hierarchy so a
single call to setup_logging() controls console and file output.
Agents log through LoggerMixin, which names the logger after the class
(e.g. "DrugInformationAgent"), making multi-agent traces easy to follow.
"""
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


# Module-level flag to prevent duplicate handler registration
_logging_configured = False

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_level: str = "DEBUG", log_dir: Optional[Path] = None) -> logging.Logger:
    """
    Configure application-wide logging.

    Safe to call more than once; handlers are only installed the first time.

    Args:
        log_level: Console logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files. Defaults to 'logs/' in project root.

    Returns:
        Configured root logger instance

    Example:
        >>> from medassist.core.logging_config import setup_logging
        >>> logger = setup_logging("INFO")
        >>> logger.info("Application started")
    """
    global _logging_configured

    if _logging_configured:
        return logging.getLogger()

    if log_dir is None:
        log_dir = Path(__file__).parent.parent.parent / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # One file per day, captures everything
    log_file = log_dir / f"app_{datetime.now().strftime('%Y%m%d')}.log"
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.DEBUG)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    # requests/httpx chatter drowns out agent traces at DEBUG
    for noisy in ("httpx", "httpcore", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    _logging_configured = True
    root_logger.debug(f"Logging configured: level={log_level}, file={log_file}")

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    Args:
        name: Logger name, typically __name__ of the calling module

    Returns:
        Logger instance for the specified name

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Routing query")
        2025-01-15 10:30:45 | INFO     | medassist.agents.orchestrator:88 | Routing query
    """
    return logging.getLogger(name)


class LoggerMixin:
    """
    Mixin class to add logging capability to any class.

    Provides a self.logger attribute named after the concrete class.

    Example:
        >>> class DosageAgent(BaseAgent, LoggerMixin):
        ...     def process(self, agent_input, context):
        ...         self.logger.info("Processing dosage request")
    """

    @property
    def logger(self) -> logging.Logger:
        """Get logger named after this class."""
        return get_logger(self.__class__.__name__)
