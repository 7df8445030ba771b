from decimal import Decimal

import pytest
from sqlalchemy import update

from marketplace.data.models import CatalogSetModel, UserModel
from marketplace.domain.errors import AuthorizationError, NotFoundError, ValidationError
from marketplace.domain.schemas import OrderFilters, OrderPatch, OrderStatus
from marketplace.services.checkout_service import CheckoutService
from marketplace.services.order_service import OrderService
from marketplace.utils.pagination import parse_pagination
from tests.conftest import (
    ADDRESS,
    APPROVED,
    CUSTOMER_ID,
    OTHER_CUSTOMER_ID,
    OTHER_PROVIDER_ID,
    OTHER_PROVIDERS,
    PROVIDER_ID,
)

FIRST_PAGE = parse_pagination(None, None)


@pytest.fixture
def orders(db, seed, notifications, customer, other_customer):
    """Trzy zamowienia: jane u providera 2 i 3, john u providera 2."""
    checkout = CheckoutService(db, notification_service=notifications)
    return {
        "jane_p2": checkout.checkout(customer, PROVIDER_ID, [{"provider_set_id": APPROVED, "quantity": 1}], ADDRESS),
        "jane_p3": checkout.checkout(
            customer, OTHER_PROVIDER_ID, [{"provider_set_id": OTHER_PROVIDERS, "quantity": 2}], ADDRESS
        ),
        "john_p2": checkout.checkout(
            other_customer, PROVIDER_ID, [{"provider_set_id": APPROVED, "quantity": 3}], ADDRESS
        ),
    }


@pytest.fixture
def service(db):
    return OrderService(db)


def _ids(result):
    return {o.id for o in result["items"]}


def test_customer_sees_only_own_orders(service, orders, customer):
    result = service.list_orders(customer, OrderFilters(), FIRST_PAGE)

    assert _ids(result) == {orders["jane_p2"].id, orders["jane_p3"].id}
    assert result["pagination"]["total"] == 2


def test_customer_cannot_widen_scope_with_filters(service, orders, customer):
    # filtr po innym kliencie jest ignorowany dla nie-admina
    result = service.list_orders(customer, OrderFilters(customer_id=OTHER_CUSTOMER_ID), FIRST_PAGE)
    assert _ids(result) == {orders["jane_p2"].id, orders["jane_p3"].id}


def test_provider_sees_only_orders_placed_with_them(service, orders, provider, other_provider):
    assert _ids(service.list_orders(provider, OrderFilters(), FIRST_PAGE)) == {
        orders["jane_p2"].id,
        orders["john_p2"].id,
    }
    assert _ids(service.list_orders(other_provider, OrderFilters(), FIRST_PAGE)) == {orders["jane_p3"].id}


def test_admin_and_production_see_everything(service, orders, admin, production):
    every = {o.id for o in orders.values()}
    assert _ids(service.list_orders(admin, OrderFilters(), FIRST_PAGE)) == every
    assert _ids(service.list_orders(production, OrderFilters(), FIRST_PAGE)) == every


def test_admin_can_filter_by_owner(service, orders, admin):
    result = service.list_orders(admin, OrderFilters(customer_id=CUSTOMER_ID, provider_id=PROVIDER_ID), FIRST_PAGE)
    assert _ids(result) == {orders["jane_p2"].id}


def test_filter_by_order_number(service, orders, customer):
    number = orders["jane_p3"].order_number
    result = service.list_orders(customer, OrderFilters(order_number=number), FIRST_PAGE)
    assert [o.order_number for o in result["items"]] == [number]


def test_pagination_meta(service, orders, admin):
    result = service.list_orders(admin, OrderFilters(), parse_pagination(2, 2))

    assert len(result["items"]) == 1
    assert result["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}


def test_listing_omits_items(service, orders, admin):
    result = service.list_orders(admin, OrderFilters(), FIRST_PAGE)
    assert all(o.items is None for o in result["items"])


def test_get_order_returns_items(service, orders, customer):
    order = service.get_order(customer, orders["jane_p3"].id)

    assert order.total_amount == Decimal("40.00")
    assert [(i.provider_set_id, i.quantity) for i in order.items] == [(OTHER_PROVIDERS, 2)]


def test_foreign_order_looks_missing(service, orders, other_customer, other_provider):
    with pytest.raises(NotFoundError):
        service.get_order(other_customer, orders["jane_p2"].id)
    with pytest.raises(NotFoundError):
        service.get_order(other_provider, orders["jane_p2"].id)
    with pytest.raises(NotFoundError):
        service.get_order(other_customer, 12345)


def test_stats_per_role(service, orders, admin, customer, provider):
    service.update_order(admin, orders["jane_p2"].id, OrderPatch(status=OrderStatus.CONFIRMED))

    admin_stats = service.order_stats(admin)
    assert admin_stats.users == 6
    assert admin_stats.sets == 4
    # aktywne i zatwierdzone: bez PENDING i INACTIVE
    assert admin_stats.provider_sets == 4
    assert admin_stats.orders == 3
    assert admin_stats.pending_orders == 2
    assert admin_stats.total_revenue == Decimal("12.50")

    provider_stats = service.order_stats(provider)
    # APPROVED, APPROVED_CHEAP, SCARCE i niezatwierdzona PENDING
    assert provider_stats.provider_sets == 4
    assert provider_stats.orders == 2
    assert provider_stats.pending_orders == 1
    assert provider_stats.total_revenue == Decimal("12.50")
    assert provider_stats.users is None

    customer_stats = service.order_stats(customer)
    assert customer_stats.orders == 2
    assert customer_stats.pending_orders == 1
    assert customer_stats.total_revenue is None
    assert customer_stats.provider_sets is None


def test_production_has_no_stats(service, orders, production):
    assert service.order_stats(production).model_dump(exclude_none=True) == {}


def test_admin_stats_skip_inactive_rows(service, orders, admin, db):
    db.execute(update(UserModel).where(UserModel.id == OTHER_CUSTOMER_ID).values(is_active=False))
    db.execute(update(CatalogSetModel).where(CatalogSetModel.id == 3).values(active=False))
    db.commit()

    stats = service.order_stats(admin)
    assert stats.users == 5
    assert stats.sets == 3


def test_provider_updates_status_of_own_order(service, orders, provider):
    updated = service.update_order(provider, orders["jane_p2"].id, OrderPatch(status=OrderStatus.SHIPPED))

    assert updated.status == OrderStatus.SHIPPED


def test_provider_cannot_touch_foreign_order(service, orders, other_provider):
    with pytest.raises(NotFoundError):
        service.update_order(other_provider, orders["jane_p2"].id, OrderPatch(status=OrderStatus.SHIPPED))


def test_customer_cannot_change_status(service, orders, customer):
    with pytest.raises(AuthorizationError) as exc:
        service.update_order(customer, orders["jane_p2"].id, OrderPatch(status=OrderStatus.CANCELLED))
    assert exc.value.message == "You do not have permission to update order status"


def test_production_marks_order_printed(service, orders, production, customer):
    updated = service.update_order(production, orders["jane_p2"].id, OrderPatch(printed=True))
    assert updated.printed is True
    assert service.get_order(customer, orders["jane_p2"].id).printed is True


def test_production_cannot_change_status(service, orders, production):
    with pytest.raises(AuthorizationError):
        service.update_order(production, orders["jane_p2"].id, OrderPatch(status=OrderStatus.DELIVERED))


def test_provider_cannot_mark_printed(service, orders, provider):
    with pytest.raises(AuthorizationError):
        service.update_order(provider, orders["jane_p2"].id, OrderPatch(printed=True))


def test_empty_patch_rejected(service, orders, admin):
    with pytest.raises(ValidationError):
        service.update_order(admin, orders["jane_p2"].id, OrderPatch())


def test_null_status_rejected(service, orders, admin):
    with pytest.raises(ValidationError):
        service.update_order(admin, orders["jane_p2"].id, OrderPatch(status=None))
