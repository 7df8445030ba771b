# marketplace/api/routers/settings.py
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from marketplace.api.deps import get_current_identity, get_settings_cache
from marketplace.api.responses import ok
from marketplace.data.database import get_db
from marketplace.domain.policy import Identity
from marketplace.domain.schemas import Envelope, SettingOut, SettingUpdate
from marketplace.services.settings_cache import SettingsCache
from marketplace.services.settings_service import SettingsService

router = APIRouter(prefix="/settings", tags=["settings"])


def get_service(db: Session = Depends(get_db), cache: SettingsCache = Depends(get_settings_cache)):
    return SettingsService(db, cache)


@router.get("", response_model=Envelope[Dict[str, Any]])
def get_settings(
    identity: Identity = Depends(get_current_identity),
    svc: SettingsService = Depends(get_service),
):
    return ok(svc.get_all(identity))


@router.get("/{key}", response_model=Envelope[SettingOut])
def get_setting(key: str, svc: SettingsService = Depends(get_service)):
    """Publiczny odczyt pojedynczego ustawienia."""
    return ok(svc.get(key))


@router.put("/{key}", response_model=Envelope[SettingOut])
def update_setting(
    key: str,
    payload: SettingUpdate,
    identity: Identity = Depends(get_current_identity),
    svc: SettingsService = Depends(get_service),
):
    return ok(svc.update(identity, key, payload))
