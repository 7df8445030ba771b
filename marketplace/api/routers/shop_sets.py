# marketplace/api/routers/shop_sets.py
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.api.deps import get_page
from marketplace.api.responses import ok
from marketplace.data.database import get_db
from marketplace.domain.schemas import Envelope, Paginated, ShopFilters, ShopSetOut
from marketplace.services.provider_set_service import ProviderSetService
from marketplace.utils.pagination import Page

router = APIRouter(prefix="/shop-sets", tags=["shop"])


@router.get("", response_model=Envelope[Paginated[ShopSetOut]])
def list_shop_sets(
    provider_id: Optional[int] = Query(None),
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    min_price: Optional[Decimal] = Query(None),
    max_price: Optional[Decimal] = Query(None),
    page: Page = Depends(get_page),
    db: Session = Depends(get_db),
):
    """Publiczna lista ofert dla klientow, bez logowania."""
    filters = ShopFilters(
        provider_id=provider_id,
        category=category,
        search=search,
        min_price=min_price,
        max_price=max_price,
    )
    return ok(ProviderSetService(db).list_shop(filters, page))
