"""Central configuration helper for the HR admin bridge."""

import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

TRUE_VALUES = ("true", "1", "yes", "on")


class HelperConfig:
    """Reads every setting from environment variables.

    A ``.env`` file (the one in the working directory, or ``env_file``) is loaded
    once on construction; variables already set in the process win over it.
    Keys are case-insensitive, empty values count as unset, and a missing key
    without a default raises ``ValueError``.
    """

    def __init__(self, logger: logging.Logger, env_file: str | None = None, load_env_file: bool = True) -> None:
        self._logger = logger
        if load_env_file:
            load_dotenv(dotenv_path=env_file, override=False)

    def _read(self, key: str, default: Any) -> tuple[str | None, Any]:
        """Return (stripped raw value, default) and fail for a required key that is missing."""
        key = key.upper()
        raw = (os.getenv(key) or "").strip() or None
        if raw is None and default is None:
            raise ValueError(f"Environment variable '{key}' is not set.")
        return raw, default

    def get_string_val(self, key: str, default: str | None = None) -> str:
        raw, default = self._read(key, default)
        return raw if raw is not None else default

    def get_number_val(self, key: str, default: float | int | None = None) -> float | int:
        """Integers stay ints, anything with a decimal point becomes a float.

        Raises:
            ValueError: If the key is missing without a default or the value is not numeric.
        """
        raw, default = self._read(key, default)
        if raw is None:
            return default
        try:
            return float(raw) if "." in raw else int(raw)
        except ValueError:
            raise ValueError(f"Environment variable '{key.upper()}' is not a valid number: '{raw}'.")

    def get_bool_val(self, key: str, default: bool | None = None) -> bool:
        raw, default = self._read(key, default)
        return default if raw is None else raw.lower() in TRUE_VALUES

    def get_path_val(self, key: str, default: str | None = None, create: bool = False) -> Path:
        """Filesystem path; relative values are resolved against ROOT_DIR (or the cwd).

        Args:
            key (str): Environment variable name.
            default (str | None): Used when the variable is not set.
            create (bool): Create the directory if it does not exist.

        Returns:
            Path: The absolute path.
        """
        path = Path(self.get_string_val(key, default=default)).expanduser()
        if not path.is_absolute():
            path = Path(os.getenv("ROOT_DIR") or os.getcwd()) / path
        if create:
            path.mkdir(parents=True, exist_ok=True)
        return path

    def get_logger(self) -> logging.Logger:
        return self._logger
