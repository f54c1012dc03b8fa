"""
Settings store

Loads and saves Settings through an opaque key-value capability. Values are
JSON strings under these keys:
- "settings": the settings object (camelCase keys)
- "isNightLight", "nightLightColor": night light preferences, kept as
  separate keys for compatibility with older saves
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from pydantic import ValidationError as PydanticValidationError

from sleepclock.exceptions import StorageError, ValidationError
from sleepclock.models.schedule import Schedule
from sleepclock.models.settings import Settings
from sleepclock.utils.datetime_helpers import parse_time_of_day

logger = logging.getLogger(__name__)

SETTINGS_KEY = "settings"
NIGHT_LIGHT_KEY = "isNightLight"
NIGHT_LIGHT_COLOR_KEY = "nightLightColor"

# Key names used by older saves -> current field names
LEGACY_FIELD_NAMES = {
    "quietTime": "quiet_time_minutes",
    "isNightLight": "night_light",
}


class KeyValueStore(Protocol):
    """String key-value persistence"""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...


class InMemoryKeyValueStore:
    """KeyValueStore backed by a dict"""

    def __init__(self, items: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value


class JsonFileKeyValueStore:
    """KeyValueStore backed by a single JSON object file"""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(
                f"Failed to read {self.path}: {e}",
                operation="read_store",
                cause=e
            )
        if not isinstance(data, dict):
            raise StorageError(f"{self.path} does not contain a JSON object", operation="read_store")
        return data

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value

        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # Write to a temp file and rename so a crash never leaves half a file
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            raise StorageError(
                f"Failed to write {self.path}: {e}",
                key=key,
                operation="write_store",
                cause=e
            )
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)


class SettingsStore:
    """Current settings, with load/update/reset persisted to a KeyValueStore"""

    def __init__(self, kv_store: KeyValueStore):
        self.kv_store = kv_store
        self._settings = Settings()

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_schedule(self) -> Schedule:
        """Schedule accessor handed to the clock driver"""
        return self._settings.schedule

    def load(self) -> Settings:
        """
        Load saved settings, migrating older formats

        Unreadable or invalid data is logged and the current settings are kept.

        Returns:
            The settings now in effect
        """
        try:
            data = self._read_saved()
        except StorageError:
            logger.warning("Could not read saved settings, keeping current settings")
            return self._settings

        if not data:
            logger.info("No saved settings, using defaults")
            return self._settings

        try:
            self._settings = Settings.model_validate(data)
        except PydanticValidationError as e:
            logger.error(f"Saved settings are invalid, keeping current settings: {e}")
            return self._settings

        logger.info(f"Loaded settings: bedtime {self._settings.bedtime}, wake {self._settings.wake_time}")
        return self._settings

    def update(self, **changes: Any) -> Settings:
        """
        Merge changes into the settings and save them

        Args:
            **changes: Field names (or camelCase aliases) and new values

        Returns:
            The updated settings

        Raises:
            ValidationError: If a key is not a setting or the merged settings are invalid
            StorageError: If saving fails
        """
        merged = self._settings.model_dump()
        for key, value in changes.items():
            name = self._field_name(key)
            if name not in Settings.model_fields:
                raise ValidationError(
                    f"Unknown setting '{key}'",
                    field=key,
                    value=value,
                    operation="update_settings"
                )
            merged[name] = value

        try:
            updated = Settings.model_validate(merged)
        except PydanticValidationError as e:
            first_error = e.errors()[0]
            field = str(first_error.get("loc", ["settings"])[0])
            raise ValidationError(
                first_error.get("msg", "Invalid value"),
                field=field,
                value=first_error.get("input"),
                operation="update_settings",
                cause=e
            )

        parse_time_of_day(updated.bedtime, field="bedtime")
        parse_time_of_day(updated.wake_time, field="wake_time")

        self._settings = updated
        self._save()
        logger.info(f"Settings updated: {', '.join(sorted(changes))}")
        return self._settings

    def reset(self) -> Settings:
        """Restore default settings and save them"""
        self._settings = Settings()
        self._save()
        logger.info("Settings reset to defaults")
        return self._settings

    def _read_saved(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}

        raw = self.kv_store.get_item(SETTINGS_KEY)
        if raw:
            data = self._decode(SETTINGS_KEY, raw)
            if not isinstance(data, dict):
                raise StorageError("Saved settings are not a JSON object", key=SETTINGS_KEY, operation="load_settings")
            data = {LEGACY_FIELD_NAMES.get(key, key): value for key, value in data.items()}

        raw_night_light = self.kv_store.get_item(NIGHT_LIGHT_KEY)
        if raw_night_light is not None:
            data["night_light"] = self._decode(NIGHT_LIGHT_KEY, raw_night_light)
            data.pop("nightLight", None)

        raw_color = self.kv_store.get_item(NIGHT_LIGHT_COLOR_KEY)
        if raw_color:
            data["night_light_color"] = raw_color
            data.pop("nightLightColor", None)

        return data

    def _save(self) -> None:
        self.kv_store.set_item(SETTINGS_KEY, self._settings.model_dump_json(by_alias=True))
        self.kv_store.set_item(NIGHT_LIGHT_KEY, json.dumps(self._settings.night_light))
        self.kv_store.set_item(NIGHT_LIGHT_COLOR_KEY, self._settings.night_light_color)

    @staticmethod
    def _decode(key: str, raw: str) -> Any:
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Saved value for '{key}' is not valid JSON", key=key, operation="load_settings", cause=e)

    @staticmethod
    def _field_name(key: str) -> str:
        if key in Settings.model_fields:
            return key
        for name, field in Settings.model_fields.items():
            if field.alias == key:
                return name
        return LEGACY_FIELD_NAMES.get(key, key)
