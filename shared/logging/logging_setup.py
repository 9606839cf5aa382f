from datetime import datetime
from pytz import timezone
import logging.config
import logging
import os
from logging import Logger


debug_mode = os.getenv("LOG_LEVEL", "info").lower() == "debug"
loglevel = logging.DEBUG if debug_mode else logging.INFO

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3

_ANSI_RESET = "\033[0m"
_ANSI_COLORS = {
    "cyan": 36,
    "green": 32,
    "yellow": 33,
    "red": 31,
    "magenta": 35,
    "blue": 34,
    "white": 37,
}
_LEVEL_PREFIX = {
    logging.CRITICAL: "⛔ ",
    logging.ERROR: "⛔ ",
    logging.WARNING: "⚠️ ",
}

# env keys whose values must never show up in a log line
SECRET_ENV_KEYS = ("HR_KOZI_PASSWORD", "APP_API_KEY", "MAIL_SMTP_PASSWORD", "LLM_OPENAI_API_KEY", "EMBED_OPENAI_API_KEY")

# third party loggers that are too chatty below WARNING
_NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "aiosqlite", "pypdf")


class SecretMaskFilter(logging.Filter):
    """Replaces configured secrets (HR account password, API keys) with ``****``."""

    def __init__(self, secrets: list[str] | None = None):
        super().__init__()
        # very short values would mask ordinary words
        self._secrets = [s for s in (secrets or []) if s and len(s) >= 4]

    def filter(self, record):
        if not self._secrets:
            return True
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            return True
        masked = message
        for secret in self._secrets:
            masked = masked.replace(secret, "****")
        if masked != message:
            record.msg = masked
            record.args = ()
        return True


class BridgeFormatter(logging.Formatter):
    """Timestamps in the configured timezone, an emoji prefix for warnings and errors.

    With ``use_color`` the whole line is wrapped in the ANSI color named by the
    record's ``color`` attribute (set through :class:`ColorLogger`).
    """

    def __init__(self, tz_name: str, use_color: bool = False, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.tz = timezone(tz_name)
        self.use_color = use_color

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, self.tz)
        return dt.strftime(datefmt) if datefmt else dt.isoformat()

    def format(self, record) -> str:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            message = str(record.msg)
        record.msg = _LEVEL_PREFIX.get(record.levelno, "") + message
        record.args = ()
        line = super().format(record)

        code = _ANSI_COLORS.get(getattr(record, "color", None) or "") if self.use_color else None
        return f"\033[{code}m{line}{_ANSI_RESET}" if code else line


class ColorLogger:
    """:class:`logging.Logger` wrapper whose log methods accept ``color=<name>``.

    Usage::

        logger.info("plain message")
        logger.info("payroll fetched", color="green")

    Only the console handler renders the color, the log file stays plain.
    """

    def __init__(self, logger: Logger):
        self._logger = logger

    def log(self, level: int, msg, *args, color: str | None = None, **kwargs):
        if color is not None:
            kwargs["extra"] = {**(kwargs.get("extra") or {}), "color": color}
        self._logger.log(level, msg, *args, **kwargs)

    def debug(self, msg, *args, **kwargs):
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg, *args, **kwargs):
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg, *args, **kwargs):
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg, *args, **kwargs):
        self.log(logging.ERROR, msg, *args, **kwargs)

    def critical(self, msg, *args, **kwargs):
        self.log(logging.CRITICAL, msg, *args, **kwargs)

    def exception(self, msg, *args, **kwargs):
        kwargs.setdefault("exc_info", True)
        self.log(logging.ERROR, msg, *args, **kwargs)

    def __getattr__(self, name):
        # setLevel, handlers, isEnabledFor, ...
        return getattr(self._logger, name)


def _build_config(log_file: str, tz_name: str) -> dict:
    def _formatter(use_color: bool) -> dict:
        return {"()": BridgeFormatter, "format": LOG_FORMAT, "datefmt": LOG_DATEFMT, "tz_name": tz_name, "use_color": use_color}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"plain": _formatter(False), "colored": _formatter(True)},
        "filters": {
            "secrets": {"()": SecretMaskFilter, "secrets": [os.getenv(key, "") for key in SECRET_ENV_KEYS]},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "colored",
                "filters": ["secrets"],
                "level": loglevel,
                "stream": "ext://sys.stdout",
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "plain",
                "filters": ["secrets"],
                "level": loglevel,
                "filename": log_file,
                "maxBytes": LOG_FILE_MAX_BYTES,
                "backupCount": LOG_FILE_BACKUPS,
                "encoding": "utf-8",
            },
        },
        "root": {"handlers": ["console", "file"], "level": loglevel},
    }


def setup_logging(name: str = "hr_admin_bridge") -> ColorLogger:
    """Configure console and file logging under ``<ROOT_DIR>/logs`` and return the app logger."""
    log_dir = os.path.join(os.getenv("ROOT_DIR") or os.getcwd(), "logs")
    os.makedirs(log_dir, exist_ok=True)

    logging.config.dictConfig(_build_config(os.path.join(log_dir, "app.log"), os.getenv("TIMEZONE", "Africa/Kigali")))
    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.DEBUG if debug_mode else logging.WARNING)

    return ColorLogger(logging.getLogger(name))
