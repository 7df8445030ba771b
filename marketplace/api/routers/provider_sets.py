# marketplace/api/routers/provider_sets.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.api.deps import get_current_identity, get_page
from marketplace.api.responses import ok
from marketplace.data.database import get_db
from marketplace.domain.policy import Identity
from marketplace.domain.schemas import (
    AdminStatus,
    Envelope,
    Paginated,
    ProviderSetCreate,
    ProviderSetFilters,
    ProviderSetOut,
    ProviderSetPatch,
)
from marketplace.services.provider_set_service import ProviderSetService
from marketplace.utils.pagination import Page

router = APIRouter(prefix="/provider-sets", tags=["provider-sets"])


def get_service(db: Session):
    return ProviderSetService(db)


@router.get("", response_model=Envelope[Paginated[ProviderSetOut]])
def list_provider_sets(
    provider_id: Optional[int] = Query(None),
    set_id: Optional[int] = Query(None),
    is_active: Optional[bool] = Query(None),
    admin_status: Optional[AdminStatus] = Query(None),
    page: Page = Depends(get_page),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    filters = ProviderSetFilters(
        provider_id=provider_id,
        set_id=set_id,
        is_active=is_active,
        admin_status=admin_status,
    )
    return ok(get_service(db).list_listings(identity, filters, page))


@router.post("", response_model=Envelope[ProviderSetOut], status_code=201)
def create_provider_set(
    payload: ProviderSetCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return ok(get_service(db).create_listing(identity, payload))


@router.get("/{listing_id}", response_model=Envelope[ProviderSetOut])
def get_provider_set(
    listing_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return ok(get_service(db).get_listing(identity, listing_id))


@router.put("/{listing_id}", response_model=Envelope[ProviderSetOut])
def update_provider_set(
    listing_id: int,
    payload: ProviderSetPatch,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return ok(get_service(db).update_listing(identity, listing_id, payload))
