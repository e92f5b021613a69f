"""
SODE app config persistence (platformdirs + JSON).

Persisted items (schema v1):
- calendar_index: selected conception calendar (1..14)
- antiquus_adjustment: scale growth curves by antiquus / modern length ratios
- metrics_csv / coefficients_csv: source of the depth-length models
- adult_bison_csv / length_ratios_csv: source / cache of the length ratios
- text_size: tailwind text size for setUpGuiDefaults

Behavior:
- If config file missing or unreadable -> defaults are used
- If schema_version mismatches -> reset to defaults
- Unknown keys in loaded JSON are ignored with warnings
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from platformdirs import user_config_dir

from sodecal.resolvers.body_size import load_or_bootstrap_ratios
from sodecal.resolvers.conception_priors import calendar_catalog
from sodecal.resolvers.gestation_age import GestationAgeResolver
from sodecal.sode_widget.controller import DEFAULT_CALENDAR_INDEX
from sodecal.utils.gui_defaults import TEXT_SIZE_QUASAR
from sodecal.utils.logging import get_logger

logger = get_logger(__name__)

# Increment when you make a breaking change to the on-disk JSON schema.
SCHEMA_VERSION: int = 1

APP_NAME = "sodecal"
CONFIG_FILENAME = "sode_app_config.json"
RATIO_CACHE_FILENAME = "length_ratios.csv"

_PATH_KEYS = ("metrics_csv", "coefficients_csv", "adult_bison_csv", "length_ratios_csv")


@dataclass
class SodeAppConfigData:
    """JSON-serializable config payload. Paths are stored as strings ("" = unset)."""

    schema_version: int = SCHEMA_VERSION
    calendar_index: int = DEFAULT_CALENDAR_INDEX
    antiquus_adjustment: bool = False
    metrics_csv: str = ""
    coefficients_csv: str = ""
    adult_bison_csv: str = ""
    length_ratios_csv: str = ""
    text_size: str = "text-sm"

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "schema_version": self.schema_version,
            "calendar_index": self.calendar_index,
            "antiquus_adjustment": self.antiquus_adjustment,
            "metrics_csv": self.metrics_csv,
            "coefficients_csv": self.coefficients_csv,
            "adult_bison_csv": self.adult_bison_csv,
            "length_ratios_csv": self.length_ratios_csv,
            "text_size": self.text_size,
        }

    @classmethod
    def from_json_dict(cls, d: Dict[str, Any]) -> "SodeAppConfigData":
        """
        Tolerant loader:
        - ignores unknown keys (with a warning)
        - invalid values fall back to defaults
        """
        defaults = cls()
        schema_version = -1
        try:
            schema_version = int(d.get("schema_version", -1))
        except (TypeError, ValueError):
            logger.warning(f"schema_version {d.get('schema_version')!r} is not an int")

        calendar_index = defaults.calendar_index
        try:
            calendar_index = int(d.get("calendar_index", calendar_index))
        except (TypeError, ValueError):
            logger.warning(f"calendar_index {d.get('calendar_index')!r} is not an int, using default")
        if not 1 <= calendar_index <= len(calendar_catalog()):
            logger.warning(f"calendar_index {calendar_index} out of range, using default")
            calendar_index = defaults.calendar_index

        antiquus = d.get("antiquus_adjustment", False)
        if not isinstance(antiquus, bool):
            logger.warning(f"antiquus_adjustment {antiquus!r} is not a bool, using False")
            antiquus = False

        paths = {}
        for key in _PATH_KEYS:
            value = d.get(key, "")
            paths[key] = value if isinstance(value, str) else ""

        text_size = d.get("text_size", defaults.text_size)
        if text_size not in TEXT_SIZE_QUASAR:
            logger.warning(f"text_size {text_size!r} is not supported, using default")
            text_size = defaults.text_size

        known_keys = {"schema_version", "calendar_index", "antiquus_adjustment", "text_size", *_PATH_KEYS}
        for key in d.keys():
            if key not in known_keys:
                logger.warning(f"Unknown key '{key}' in SODE app config, ignoring")

        return cls(
            schema_version=schema_version,
            calendar_index=calendar_index,
            antiquus_adjustment=antiquus,
            text_size=text_size,
            **paths,
        )


class SodeAppConfig:
    """Manager for loading/saving SodeAppConfigData to disk."""

    def __init__(self, *, path: Path, data: Optional[SodeAppConfigData] = None):
        self.path = path
        self.data = data if data is not None else SodeAppConfigData()

    @staticmethod
    def default_config_path(
        app_name: str = APP_NAME,
        filename: str = CONFIG_FILENAME,
        app_author: str | None = None,
    ) -> Path:
        """
        Determine OS-appropriate per-user config path.

        macOS:   ~/Library/Application Support/sodecal/sode_app_config.json
        Linux:   ~/.config/sodecal/sode_app_config.json
        Windows: %APPDATA%\\sodecal\\sode_app_config.json
        """
        d = Path(user_config_dir(app_name, app_author))
        d.mkdir(parents=True, exist_ok=True)
        return d / filename

    @classmethod
    def load(
        cls,
        *,
        config_path: Optional[Path] = None,
        schema_version: int = SCHEMA_VERSION,
        create_if_missing: bool = False,
    ) -> "SodeAppConfig":
        """
        Load config from disk.

        If file doesn't exist or is unreadable -> defaults.
        If schema mismatch -> defaults.
        If create_if_missing=True and file is missing -> immediately write defaults.
        """
        path = config_path or cls.default_config_path()
        default_data = SodeAppConfigData(schema_version=schema_version)

        try:
            parsed = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.debug(f"SODE app config file not found at {path}, using defaults")
            cfg = cls(path=path, data=default_data)
            if create_if_missing:
                cfg.save()
            return cfg
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"SODE app config at {path} is unreadable: {e}, using defaults")
            return cls(path=path, data=default_data)

        if not isinstance(parsed, dict):
            logger.warning(f"SODE app config file at {path} does not contain a dict, using defaults")
            return cls(path=path, data=default_data)

        loaded = SodeAppConfigData.from_json_dict(parsed)
        if int(loaded.schema_version) != int(schema_version):
            logger.warning(
                f"SODE app config schema version mismatch: loaded={loaded.schema_version}, "
                f"expected={schema_version}, resetting to defaults"
            )
            return cls(path=path, data=default_data)
        return cls(path=path, data=loaded)

    def save(self) -> None:
        """Write config to disk."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self.data.to_json_dict(), indent=2), encoding="utf-8")
            logger.info(f"Saved SODE app config to {self.path}")
        except OSError as e:
            logger.error(f"Error saving SODE app config to {self.path}: {e}")
            raise

    def length_ratios_path(self) -> Path:
        """Configured ratio cache, or length_ratios.csv next to the config file."""
        if self.data.length_ratios_csv:
            return Path(self.data.length_ratios_csv)
        return self.path.parent / RATIO_CACHE_FILENAME

    def build_resolver(self) -> Optional[GestationAgeResolver]:
        """Gestation-age resolver from the configured tables.

        Returns None when neither a metrics nor a coefficient table is set;
        the app then offers direct range entry only.

        Raises:
            FileNotFoundError: If the antiquus adjustment is on and there is
                neither a ratio cache nor an adult bison table.
            ValueError: If a configured table is malformed.
        """
        d = self.data
        if not d.metrics_csv and not d.coefficients_csv:
            logger.info("no depth-length tables configured")
            return None

        ratios = None
        if d.antiquus_adjustment:
            ratios = load_or_bootstrap_ratios(self.length_ratios_path(), d.adult_bison_csv or None)

        return GestationAgeResolver.from_sources(
            metrics_csv=d.metrics_csv or None,
            coefficients_csv=d.coefficients_csv or None,
            length_ratios=ratios,
        )
