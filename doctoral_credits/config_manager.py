import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

ENV_PREFIX = "DOCTORAL_CREDITS_"

class ConfigManager:
    """
    Manages application configuration.

    Values are resolved in increasing precedence: built-in defaults, the
    `[tracker]` table of the Streamlit secrets (passed in by the app), then
    `DOCTORAL_CREDITS_<KEY>` environment variables.
    """

    DEFAULTS = {
        "storage_path": "~/.doctoral_credits/storage.json",
        "storage_key": "doctoralActivities",
        "ruleset": "standard",
        "log_dir": "",  # Console-only logging when empty
        "log_level": "INFO",
    }

    def __init__(self,
                 overrides: Optional[Mapping[str, Any]] = None,
                 environ: Optional[Mapping[str, str]] = None):
        self._settings: Dict[str, Any] = dict(self.DEFAULTS)

        for key, value in (overrides or {}).items():
            if key in self.DEFAULTS:
                self._settings[key] = value

        env = os.environ if environ is None else environ
        for key in self.DEFAULTS:
            env_value = env.get(ENV_PREFIX + key.upper())
            if env_value is not None:
                self._settings[key] = env_value

    def get(self, key: str, default: Any = None) -> Any:
        return self._settings.get(key, default)

    @property
    def storage_path(self) -> Path:
        return Path(str(self._settings["storage_path"])).expanduser()

    @property
    def log_dir(self) -> Optional[Path]:
        value = self._settings.get("log_dir")
        return Path(str(value)).expanduser() if value else None

    def get_all_config(self) -> Dict[str, Any]:
        """Returns a copy of the full settings dict."""
        return dict(self._settings)
