# marketplace/api/routers/orders.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from marketplace.api.deps import get_current_identity, get_page
from marketplace.api.responses import ok
from marketplace.data.database import get_db
from marketplace.domain.policy import Identity
from marketplace.domain.schemas import (
    CheckoutIn,
    Envelope,
    OrderFilters,
    OrderOut,
    OrderPatch,
    OrderStatsOut,
    OrderStatus,
    Paginated,
)
from marketplace.services.checkout_service import CheckoutService
from marketplace.services.order_service import OrderService
from marketplace.utils.pagination import Page

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.post("", response_model=Envelope[OrderOut], status_code=201)
def create_order(
    payload: CheckoutIn,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    Checkout: tworzy zamówienie z koszyka klienta.
    Ceny i stany brane z ofert w momencie commita.
    """
    svc = CheckoutService(db)
    return ok(svc.checkout(identity, payload.provider_id, payload.items, payload.shipping_address))


@router.get("", response_model=Envelope[Paginated[OrderOut]])
def list_orders(
    customer_id: Optional[int] = Query(None),
    provider_id: Optional[int] = Query(None),
    status: Optional[OrderStatus] = Query(None),
    order_number: Optional[str] = Query(None),
    page: Page = Depends(get_page),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    filters = OrderFilters(
        customer_id=customer_id,
        provider_id=provider_id,
        status=status,
        order_number=order_number,
    )
    return ok(get_service(db).list_orders(identity, filters, page))


@router.get("/stats", response_model=Envelope[OrderStatsOut], response_model_exclude_none=True)
def order_stats(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return ok(get_service(db).order_stats(identity))


@router.get("/{order_id}", response_model=Envelope[OrderOut])
def get_order(
    order_id: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return ok(get_service(db).get_order(identity, order_id))


@router.put("/{order_id}", response_model=Envelope[OrderOut])
def update_order(
    order_id: int,
    payload: OrderPatch,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    Zmiana statusu (admin, provider zamowienia) albo flagi printed (admin, produkcja).
    """
    return ok(get_service(db).update_order(identity, order_id, payload))
