# marketplace/services/settings_service.py
import json
import math
from typing import Any, Dict

from sqlalchemy.orm import Session, sessionmaker

from marketplace.data.database import transaction
from marketplace.data.models.system_setting import SystemSettingModel
from marketplace.domain.errors import NotFoundError, ValidationError
from marketplace.domain.policy import Action, Identity, ensure_allowed
from marketplace.domain.schemas import SettingOut, SettingUpdate
from marketplace.repos.setting_repo import SettingRepo
from marketplace.services.settings_cache import SettingsCache
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def parse_setting_value(raw: str, setting_type: str) -> Any:
    if setting_type == "number":
        try:
            return int(raw)
        except ValueError:
            return float(raw)
    if setting_type == "boolean":
        return raw == "true"
    if setting_type == "json":
        try:
            return json.loads(raw)
        except ValueError:
            #niepoprawny json zostaje stringiem
            return raw
    return raw


def serialize_setting_value(value: Any, setting_type: str) -> str:
    if setting_type == "json":
        return json.dumps(value)
    if setting_type == "boolean":
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower()
        raise ValidationError("Value must be a boolean")
    if setting_type == "number":
        if isinstance(value, bool):
            raise ValidationError("Value must be a number")
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            raise ValidationError("Value must be a number")
        #NaN, Infinity i 1e999 przechodza przez float(), ale nie sa liczba do zapisania
        if not math.isfinite(number):
            raise ValidationError("Value must be a finite number")
        return str(value)
    return str(value)


def _to_out(setting: SystemSettingModel) -> SettingOut:
    return SettingOut(
        setting=setting.setting_key,
        value=parse_setting_value(setting.setting_value, setting.setting_type),
        type=setting.setting_type,
    )


def settings_loader(session_factory: sessionmaker):
    """Loader dla SettingsCache: wlasna krotka sesja, niezalezna od requestu."""

    def load() -> Dict[str, SettingOut]:
        db = session_factory()
        try:
            return {s.setting_key: _to_out(s) for s in SettingRepo(db).all()}
        finally:
            db.close()

    return load


class SettingsService:
    def __init__(self, db: Session, cache: SettingsCache):
        self.db = db
        self.repo = SettingRepo(db)
        self.cache = cache

    def get_all(self, identity: Identity) -> Dict[str, Any]:
        ensure_allowed(Action.SETTINGS_READ_ALL, identity, message="Access denied. Required role: admin")
        return {key: s.value for key, s in self.cache.get_all().items()}

    def get(self, key: str) -> SettingOut:
        setting = self.cache.get(key)
        if setting is None:
            raise NotFoundError("Setting")
        return setting

    def update(self, identity: Identity, key: str, payload: SettingUpdate) -> SettingOut:
        ensure_allowed(Action.SETTINGS_WRITE, identity, message="Access denied. Required role: admin")

        raw = serialize_setting_value(payload.value, payload.type)

        with transaction(self.db):
            setting = self.repo.upsert(key, raw, payload.type, payload.description)

        #write-through: kolejny odczyt zobaczy nowa wartosc
        self.cache.invalidate(key)

        logger.info(f"Setting {key} updated")
        return _to_out(setting)
