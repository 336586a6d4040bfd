"""Process logging for the CLI and the panel bridge.

Root level and format come from ``logging.level`` / ``logging.format``
(env LOGGING_LEVEL, LOGGING_FORMAT). Every Jira and GitHub call goes
through requests/urllib3, which log each connection at DEBUG; those
loggers stay at WARNING unless ``logging.debug_http`` is set.
"""

import logging

from sugarflow.config import LoggingConfig

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_NAMED_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class SugarflowLogging:
    """Applies LoggingConfig to the root logger and the HTTP client loggers."""

    def __init__(self, config: LoggingConfig) -> None:
        name = (config.level or "").upper().strip()
        self.unknown_level = name not in _NAMED_LEVELS
        self.level = logging.INFO if self.unknown_level else logging.getLevelName(name)
        self.format = config.format or DEFAULT_FORMAT
        self.http_loggers = list(config.quiet_loggers)
        self.debug_http = config.debug_http
        self._requested = config.level

    def setup(self) -> None:
        logging.basicConfig(level=self.level, format=self.format, force=True)
        http_level = logging.NOTSET if self.debug_http else max(self.level, logging.WARNING)
        for name in self.http_loggers:
            logging.getLogger(name).setLevel(http_level)
        if self.unknown_level:
            logging.getLogger("sugarflow").warning("Unknown log level %r, using INFO", self._requested)
