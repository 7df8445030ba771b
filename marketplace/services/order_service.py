# marketplace/services/order_service.py
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from marketplace.data.database import transaction
from marketplace.data.models.catalog_set import CatalogSetModel
from marketplace.data.models.order import OrderModel
from marketplace.data.models.provider_set import ProviderSetModel
from marketplace.data.models.user import UserModel
from marketplace.domain.errors import NotFoundError, ValidationError
from marketplace.domain.policy import Action, Identity, Ownership, Role, ensure_allowed, is_allowed
from marketplace.domain.schemas import OrderFilters, OrderItemOut, OrderOut, OrderPatch, OrderStatsOut
from marketplace.repos.catalog_repo import CatalogRepo
from marketplace.repos.order_repo import OrderRepo
from marketplace.repos.provider_set_repo import ProviderSetRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.utils.logging import get_logger
from marketplace.utils.pagination import Page, paginated

logger = get_logger(__name__)

#pole patcha -> akcja ktora trzeba miec zeby je zmienic
_PATCH_ACTIONS = {
    "status": Action.ORDER_UPDATE_STATUS,
    "printed": Action.ORDER_UPDATE_PRINTED,
}


def serialize_order(order: OrderModel, with_items: bool = False) -> OrderOut:
    items = None
    if with_items:
        items = [
            OrderItemOut(
                id=i.id,
                set_id=i.set_id,
                provider_set_id=i.provider_set_id,
                set_name=i.catalog_set.name if i.catalog_set else None,
                quantity=i.quantity,
                unit_price=i.unit_price,
                line_total=i.line_total,
            )
            for i in order.items
        ]

    return OrderOut(
        id=order.id,
        order_number=order.order_number,
        customer_id=order.customer_id,
        provider_id=order.provider_id,
        status=order.status,
        total_amount=order.total_amount,
        currency=order.currency,
        shipping_address=order.shipping_address,
        printed=order.printed,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=items,
    )


def _ownership(order: OrderModel) -> Ownership:
    return Ownership(customer_id=order.customer_id, provider_id=order.provider_id)


class OrderService:
    """
    Odczyt i zmiany zamowien po checkoucie.
    Kazda rola widzi tylko zamowienia w swojej granicy wlasnosci:
    customer swoje, provider swoje, admin i produkcja wszystkie.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)

    #query
    def _scope_conditions(self, identity: Identity) -> list:
        if identity.role == Role.CUSTOMER:
            return [OrderModel.customer_id == identity.user_id]
        if identity.role == Role.PROVIDER:
            return [OrderModel.provider_id == identity.user_id]
        return []

    def list_orders(self, identity: Identity, filters: OrderFilters, page: Page) -> dict:
        conditions = self._scope_conditions(identity)

        # filtr po wlascicielu tylko dla admina, reszta rol ma go narzuconego
        if is_allowed(Action.ORDER_FILTER_BY_OWNER, identity):
            if filters.customer_id is not None:
                conditions.append(OrderModel.customer_id == filters.customer_id)
            if filters.provider_id is not None:
                conditions.append(OrderModel.provider_id == filters.provider_id)

        if filters.status is not None:
            conditions.append(OrderModel.status == filters.status.value)
        if filters.order_number:
            conditions.append(OrderModel.order_number == filters.order_number)

        rows, total = self.repo.list_orders(conditions, page.offset, page.limit)

        logger.info(f"Orders listed for {identity.role.value} {identity.user_id}: {len(rows)} of {total}")

        return paginated([serialize_order(o) for o in rows], page, total)

    def get_order(self, identity: Identity, order_id: int) -> OrderOut:
        order = self.repo.get_order(order_id, with_items=True)

        # cudze zamowienie wyglada jak nieistniejace
        if not order or not is_allowed(Action.ORDER_READ, identity, _ownership(order)):
            raise NotFoundError("Order")

        return serialize_order(order, with_items=True)

    def order_stats(self, identity: Identity) -> OrderStatsOut:
        # produkcja nie ma pulpitu, pusty obiekt
        if identity.role == Role.PRODUCTION:
            return OrderStatsOut()

        conditions = self._scope_conditions(identity)
        stats = OrderStatsOut(
            orders=self.repo.count(conditions),
            pending_orders=self.repo.count([*conditions, OrderModel.status == "pending"]),
        )

        if identity.role == Role.ADMIN:
            stats.users = UserRepo(self.db).count([UserModel.is_active.is_(True)])
            stats.sets = CatalogRepo(self.db).count_sets([CatalogSetModel.active.is_(True)])
            stats.provider_sets = ProviderSetRepo(self.db).count([
                ProviderSetModel.is_active.is_(True),
                ProviderSetModel.admin_status == "approved",
            ])
        elif identity.role == Role.PROVIDER:
            #wlasne aktywne oferty, takze te czekajace na akceptacje
            stats.provider_sets = ProviderSetRepo(self.db).count([
                ProviderSetModel.provider_id == identity.user_id,
                ProviderSetModel.is_active.is_(True),
            ])

        if identity.role != Role.CUSTOMER:
            stats.total_revenue = self.repo.revenue(conditions)
        return stats

    #commands
    def update_order(self, identity: Identity, order_id: int, patch: OrderPatch) -> OrderOut:
        fields = patch.model_dump(exclude_unset=True)
        if not fields:
            raise ValidationError("No fields to update")

        order = self.repo.get_order(order_id)
        if not order or not is_allowed(Action.ORDER_READ, identity, _ownership(order)):
            raise NotFoundError("Order")

        values = {}
        for field, value in fields.items():
            ensure_allowed(
                _PATCH_ACTIONS[field],
                identity,
                _ownership(order),
                message=f"You do not have permission to update order {field}",
            )
            if value is None:
                raise ValidationError(f"{field} cannot be null")
            values[field] = value.value if field == "status" else value

        values["updated_at"] = datetime.now(timezone.utc)

        with transaction(self.db):
            self.repo.update_order(order_id, values)

        self.db.refresh(order)

        logger.info(f"Order {order_id} updated by {identity.role.value} {identity.user_id}: {sorted(fields)}")

        return serialize_order(order)
