# marketplace/services/provider_set_service.py
from enum import Enum

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.data.database import transaction
from marketplace.data.models.provider_set import ProviderSetModel
from marketplace.domain.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from marketplace.domain.policy import Action, Identity, Ownership, ensure_allowed, is_allowed
from marketplace.domain.schemas import (
    ProviderSetCreate,
    ProviderSetFilters,
    ProviderSetOut,
    ProviderSetPatch,
    ShopFilters,
    ShopSetOut,
)
from marketplace.repos.catalog_repo import CatalogRepo
from marketplace.repos.provider_set_repo import ProviderSetRepo
from marketplace.utils.logging import get_logger
from marketplace.utils.pagination import Page, paginated

logger = get_logger(__name__)

#kolumny ktore dana rola moze zmieniac
OWNER_FIELDS = frozenset({"price", "available_quantity", "is_active", "provider_visible"})
ADMIN_FIELDS = OWNER_FIELDS | {"admin_status", "admin_notes", "admin_visible"}
NULLABLE_FIELDS = frozenset({"admin_notes"})


def serialize_listing(listing: ProviderSetModel) -> ProviderSetOut:
    out = ProviderSetOut.model_validate(listing)
    out.set_name = listing.catalog_set.name if listing.catalog_set else None
    return out


class ProviderSetService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ProviderSetRepo(db)
        self.catalog = CatalogRepo(db)

    #query
    def list_listings(self, identity: Identity, filters: ProviderSetFilters, page: Page) -> dict:
        # nie-admin widzi tylko swoje oferty
        provider_id = filters.provider_id if identity.is_admin else identity.user_id

        rows, total = self.repo.list(
            provider_id=provider_id,
            set_id=filters.set_id,
            is_active=filters.is_active,
            admin_status=filters.admin_status.value if filters.admin_status else None,
            offset=page.offset,
            limit=page.limit,
        )

        logger.info(f"Provider sets listed: {len(rows)} of {total}")
        return paginated([serialize_listing(r) for r in rows], page, total)

    def get_listing(self, identity: Identity, listing_id: int) -> ProviderSetOut:
        listing = self.repo.get(listing_id)
        if not listing or not is_allowed(
            Action.LISTING_READ, identity, Ownership(provider_id=listing.provider_id)
        ):
            raise NotFoundError("Provider set")
        return serialize_listing(listing)

    def list_shop(self, filters: ShopFilters, page: Page) -> dict:
        rows, total = self.repo.list_shop(
            provider_id=filters.provider_id,
            category=filters.category,
            search=filters.search,
            min_price=filters.min_price,
            max_price=filters.max_price,
            offset=page.offset,
            limit=page.limit,
        )
        items = [
            ShopSetOut(
                provider_set_id=listing.id,
                provider_id=listing.provider_id,
                provider_name=provider.company_name or provider.username,
                set_id=catalog_set.id,
                set_name=catalog_set.name,
                set_description=catalog_set.description,
                set_category=catalog_set.category,
                difficulty_level=catalog_set.difficulty_level,
                price=listing.price,
                available_quantity=listing.available_quantity,
            )
            for listing, catalog_set, provider in rows
        ]
        logger.info(f"Shop sets listed: {len(items)} of {total}")
        return paginated(items, page, total)

    #commands
    def create_listing(self, identity: Identity, payload: ProviderSetCreate) -> ProviderSetOut:
        ensure_allowed(Action.LISTING_CREATE, identity, message="Access denied. Required role: provider or admin")

        # provider tworzy tylko dla siebie, admin moze wskazac providera
        # TODO: sprawdzic czy provider_id od admina nalezy do usera z rola provider
        provider_id = payload.provider_id if identity.is_admin and payload.provider_id else identity.user_id

        if not self.catalog.get_set(payload.set_id):
            raise ValidationError("Set not found")

        if self.repo.find_for_provider_and_set(provider_id, payload.set_id):
            raise ValidationError("Provider set already exists for this set")

        listing = ProviderSetModel(
            provider_id=provider_id,
            set_id=payload.set_id,
            price=payload.price,
            available_quantity=payload.available_quantity,
            is_active=payload.is_active,
            provider_visible=payload.provider_visible,
            admin_visible=True,
            admin_status="pending",
            version=1,
        )

        try:
            with transaction(self.db):
                self.repo.create(listing)
        except IntegrityError:
            # wyscig dwoch rownoleglych create, constraint (provider_id, set_id)
            raise ValidationError("Provider set already exists for this set")

        logger.info(f"Provider set {listing.id} created for provider {provider_id}")
        return serialize_listing(listing)

    def update_listing(self, identity: Identity, listing_id: int, patch: ProviderSetPatch) -> ProviderSetOut:
        fields = patch.model_dump(exclude_unset=True)
        if not fields:
            raise ValidationError("No fields to update")

        listing = self.repo.get(listing_id)
        if not listing:
            raise NotFoundError("Provider set")

        ensure_allowed(
            Action.LISTING_UPDATE,
            identity,
            Ownership(provider_id=listing.provider_id),
            message="You can only update your own provider sets",
        )

        allowed = ADMIN_FIELDS if is_allowed(Action.LISTING_MODERATE, identity) else OWNER_FIELDS
        forbidden = sorted(set(fields) - allowed)
        if forbidden:
            raise AuthorizationError(
                f"You do not have permission to update: {', '.join(forbidden)}",
                details={"fields": forbidden},
            )

        values = {}
        for field, value in fields.items():
            if value is None and field not in NULLABLE_FIELDS:
                raise ValidationError(f"{field} cannot be null")
            values[field] = value.value if isinstance(value, Enum) else value

        # Optimistic locking na wersji, checkout tez ja podbija
        # wiec edycja oparta na nieaktualnym odczycie nie nadpisze dekrementacji
        with transaction(self.db):
            rowcount = self.repo.update_listing(listing_id, listing.version, values)
            if rowcount == 0:
                raise ConflictError("Provider set was modified concurrently, retry the update")

        self.db.refresh(listing)

        logger.info(f"Provider set {listing_id} updated, new version: {listing.version}")
        return serialize_listing(listing)
