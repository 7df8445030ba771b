# marketplace/services/checkout_service.py
from decimal import Decimal
from typing import Any, Callable, Dict, Mapping, Sequence

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.data.database import transaction
from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel
from marketplace.data.models.provider_set import ProviderSetModel
from marketplace.domain.errors import (
    NotAvailableError,
    OrderNumberConflict,
    ProviderMismatchError,
    StorageError,
    ValidationError,
)
from marketplace.domain.policy import Action, Identity, ensure_allowed
from marketplace.domain.schemas import CheckoutIn, OrderOut
from marketplace.repos.order_repo import OrderRepo
from marketplace.repos.provider_set_repo import ProviderSetRepo
from marketplace.services.notification_service import NotificationService
from marketplace.services.order_service import serialize_order
from marketplace.utils.logging import get_logger
from marketplace.utils.order_numbers import generate_order_number
from marketplace.utils.retry import order_number_retry
from marketplace.utils.settings import ORDER_CURRENCY

logger = get_logger(__name__)

CENT = Decimal("0.01")


def schema_error_details(e: SchemaValidationError) -> list:
    return [{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()]


def _is_order_number_violation(e: IntegrityError) -> bool:
    message = str(e.orig)
    return "order_number" in message or "uq_orders_order_number" in message


class CheckoutService:
    """
    Checkout: koszyk -> zamowienie + pozycje + dekrementacja stanow, jedna transakcja.

    1. Walidacja wejscia (bez efektow ubocznych)
    2. Blokada ofert (SELECT ... FOR UPDATE, kolejnosc po id)
    3. Sprawdzenie dostepnosci, providera i stanu
    4. Warunkowa dekrementacja, cena z wiersza oferty
    5. Insert zamowienia i pozycji, commit
    Kolizja numeru zamowienia -> rollback calosci i jedna ponowna proba z nowym numerem.
    """

    def __init__(
        self,
        db: Session,
        notification_service: NotificationService | None = None,
        currency: str | None = None,
        number_generator: Callable[[], str] = generate_order_number,
    ):
        self.db = db
        self.ledger = ProviderSetRepo(db)
        self.orders = OrderRepo(db)
        self.notification_service = notification_service or NotificationService()
        self.currency = currency or ORDER_CURRENCY
        self.number_generator = number_generator

    def checkout(
        self,
        identity: Identity,
        provider_id: int,
        items: Sequence[Any],
        shipping_address: Mapping[str, Any] | Any,
    ) -> OrderOut:
        ensure_allowed(Action.ORDER_CREATE, identity, message="Access denied. Required role: customer")

        request = self._validate(provider_id, items, shipping_address)

        logger.info(
            f"Checkout for customer {identity.user_id}: provider {request.provider_id}, "
            f"{len(request.items)} item(s)"
        )

        order = self._place_order(identity.user_id, request)

        logger.info(
            f"Order {order.order_number} (id={order.id}) created, total {order.total_amount} {order.currency}"
        )

        self.notification_service.send_order_placed(order.provider_id, order.id, order.order_number)

        return serialize_order(order, with_items=True)

    @staticmethod
    def _validate(provider_id: int, items: Sequence[Any], shipping_address: Any) -> CheckoutIn:
        if not items:
            raise ValidationError("provider_id and items array are required")
        if shipping_address is None:
            raise ValidationError("shipping_address is required")

        try:
            return CheckoutIn.model_validate(
                {
                    "provider_id": provider_id,
                    "items": list(items),
                    "shipping_address": shipping_address,
                }
            )
        except SchemaValidationError as e:
            raise ValidationError("Invalid checkout request", details=schema_error_details(e))

    @order_number_retry()
    def _place_order(self, customer_id: int, request: CheckoutIn) -> OrderModel:
        order_number = self.number_generator()

        with transaction(self.db):
            #laczny popyt na oferte, ta sama oferta moze wystapic w koszyku kilka razy
            demand: Dict[int, int] = {}
            for item in request.items:
                demand[item.provider_set_id] = demand.get(item.provider_set_id, 0) + item.quantity

            listings = self.ledger.get_listings_for_update(demand.keys())

            for listing_id, quantity in demand.items():
                self._check_listing(listing_id, listings.get(listing_id), request.provider_id, quantity)

            # Warunkowa dekrementacja, np update set available 3 where id 1 and available >= 2
            # jesli 0 rows affected to ktos inny wykupil stan miedzy odczytem a zapisem
            prices: Dict[int, Decimal] = {}
            for listing_id in sorted(demand):
                price = self.ledger.decrement_availability(listing_id, request.provider_id, demand[listing_id])
                if price is None:
                    raise NotAvailableError(listing_id, "insufficient quantity")
                prices[listing_id] = Decimal(price)

            total = Decimal("0.00")
            lines = []
            for item in request.items:
                unit_price = prices[item.provider_set_id].quantize(CENT)
                line_total = (unit_price * item.quantity).quantize(CENT)
                total += line_total
                lines.append(
                    OrderItemModel(
                        set_id=listings[item.provider_set_id].set_id,
                        provider_set_id=item.provider_set_id,
                        quantity=item.quantity,
                        unit_price=unit_price,
                        line_total=line_total,
                    )
                )

            order = OrderModel(
                order_number=order_number,
                customer_id=customer_id,
                provider_id=request.provider_id,
                status="pending",
                total_amount=total,
                currency=self.currency,
                shipping_address=request.shipping_address.model_dump(exclude_none=True),
                printed=False,
                items=lines,
            )

            try:
                self.orders.add_order(order)
            except IntegrityError as e:
                if _is_order_number_violation(e):
                    logger.warning(f"Order number {order_number} already taken, retrying")
                    raise OrderNumberConflict() from e
                raise StorageError("Could not create order") from e

            #stany wczytane wczesniej sa juz nieaktualne po dekrementacji
            for listing in listings.values():
                self.db.expire(listing)

        return order

    @staticmethod
    def _check_listing(
        listing_id: int,
        listing: ProviderSetModel | None,
        provider_id: int,
        quantity: int,
    ) -> None:
        if listing is None:
            raise NotAvailableError(listing_id, "not found")
        if not listing.is_active:
            raise NotAvailableError(listing_id, "not active")
        if listing.admin_status != "approved":
            raise NotAvailableError(listing_id, "not approved")
        if listing.provider_id != provider_id:
            raise ProviderMismatchError(listing_id, provider_id)
        if listing.available_quantity < quantity:
            raise NotAvailableError(listing_id, "insufficient quantity")
