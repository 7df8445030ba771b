# marketplace/api/routers/sets.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.api.deps import get_current_identity, get_optional_identity, get_page
from marketplace.api.responses import ok
from marketplace.data.database import get_db
from marketplace.domain.policy import Identity
from marketplace.domain.schemas import CatalogSetCreate, CatalogSetOut, Envelope, Paginated
from marketplace.services.catalog_service import CatalogService
from marketplace.utils.pagination import Page

router = APIRouter(prefix="/sets", tags=["sets"])


@router.get("", response_model=Envelope[Paginated[CatalogSetOut]])
def list_sets(
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    page: Page = Depends(get_page),
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(get_db),
):
    return ok(CatalogService(db).list_sets(identity, page, category=category, search=search))


@router.post("", response_model=Envelope[CatalogSetOut], status_code=201)
def create_set(
    payload: CatalogSetCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return ok(CatalogService(db).create_set(identity, payload))


@router.get("/{set_id}", response_model=Envelope[CatalogSetOut])
def get_set(
    set_id: int,
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(get_db),
):
    return ok(CatalogService(db).get_set(identity, set_id))
