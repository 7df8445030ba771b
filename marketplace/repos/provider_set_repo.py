# marketplace/repos/provider_set_repo.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Tuple

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from marketplace.data.models.catalog_set import CatalogSetModel
from marketplace.data.models.provider_set import ProviderSetModel
from marketplace.data.models.user import UserModel


class ProviderSetRepo:
    """
    Rejestr ofert (inventory ledger).
    Odczyty "for update" i dekrementacja musza isc w tej samej transakcji co reszta checkoutu.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, listing_id: int) -> ProviderSetModel | None:
        return self.db.get(ProviderSetModel, listing_id)

    def get_listing_for_update(self, listing_id: int) -> ProviderSetModel | None:
        return self.get_listings_for_update([listing_id]).get(listing_id)

    def get_listings_for_update(self, listing_ids: Iterable[int]) -> Dict[int, ProviderSetModel]:
        #blokady zakladane zawsze w kolejnosci id, dwa checkouty nie zakleszcza sie na tych samych wierszach
        ids = sorted(set(listing_ids))
        if not ids:
            return {}
        rows = self.db.execute(
            select(ProviderSetModel)
            .where(ProviderSetModel.id.in_(ids))
            .order_by(ProviderSetModel.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalars().all()
        return {row.id: row for row in rows}

    def decrement_availability(self, listing_id: int, provider_id: int, quantity: int) -> Decimal | None:
        """
        Warunkowa dekrementacja jednym statementem:
        UPDATE ... SET available_quantity = available_quantity - q WHERE available_quantity >= q AND ...
        Zwraca cene z tego samego wiersza albo None gdy warunek nie przeszedl.
        """
        result = self.db.execute(
            update(ProviderSetModel)
            .where(
                ProviderSetModel.id == listing_id,
                ProviderSetModel.provider_id == provider_id,
                ProviderSetModel.is_active.is_(True),
                ProviderSetModel.admin_status == "approved",
                ProviderSetModel.available_quantity >= quantity,
            )
            .values(
                available_quantity=ProviderSetModel.available_quantity - quantity,
                version=ProviderSetModel.version + 1,
                updated_at=datetime.now(timezone.utc),
            )
            .returning(ProviderSetModel.price)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one_or_none()

    def update_listing(self, listing_id: int, old_version: int, new_data: dict) -> int:
        # Optimistic locking, np update set ..., version 3 where id 1 and version 2
        result = self.db.execute(
            update(ProviderSetModel)
            .where(
                ProviderSetModel.id == listing_id,
                ProviderSetModel.version == old_version,
            )
            .values(
                **new_data,
                version=old_version + 1,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def find_for_provider_and_set(self, provider_id: int, set_id: int) -> ProviderSetModel | None:
        return self.db.execute(
            select(ProviderSetModel).where(
                ProviderSetModel.provider_id == provider_id,
                ProviderSetModel.set_id == set_id,
            )
        ).scalar_one_or_none()

    def count(self, conditions: Iterable) -> int:
        return self.db.execute(
            select(func.count()).select_from(ProviderSetModel).where(*conditions)
        ).scalar_one()

    def create(self, listing: ProviderSetModel) -> ProviderSetModel:
        self.db.add(listing)
        self.db.flush()
        return listing

    def list(
        self,
        provider_id: int | None,
        set_id: int | None,
        is_active: bool | None,
        admin_status: str | None,
        offset: int,
        limit: int,
    ) -> Tuple[List[ProviderSetModel], int]:
        conditions = []
        if provider_id is not None:
            conditions.append(ProviderSetModel.provider_id == provider_id)
        if set_id is not None:
            conditions.append(ProviderSetModel.set_id == set_id)
        if is_active is not None:
            conditions.append(ProviderSetModel.is_active.is_(is_active))
        if admin_status is not None:
            conditions.append(ProviderSetModel.admin_status == admin_status)

        total = self.db.execute(
            select(func.count()).select_from(ProviderSetModel).where(*conditions)
        ).scalar_one()
        rows = self.db.execute(
            select(ProviderSetModel)
            .where(*conditions)
            .order_by(ProviderSetModel.created_at.desc(), ProviderSetModel.id.desc())
            .offset(offset)
            .limit(limit)
        ).scalars().all()
        return list(rows), total

    def list_shop(
        self,
        provider_id: int | None,
        category: str | None,
        search: str | None,
        min_price: Decimal | None,
        max_price: Decimal | None,
        offset: int,
        limit: int,
    ) -> Tuple[list, int]:
        #tylko oferty widoczne w sklepie
        conditions = [
            ProviderSetModel.is_active.is_(True),
            ProviderSetModel.provider_visible.is_(True),
            ProviderSetModel.admin_visible.is_(True),
            ProviderSetModel.admin_status == "approved",
            CatalogSetModel.active.is_(True),
        ]
        if provider_id is not None:
            conditions.append(ProviderSetModel.provider_id == provider_id)
        if category:
            conditions.append(CatalogSetModel.category == category)
        if search:
            pattern = f"%{search}%"
            conditions.append(or_(CatalogSetModel.name.ilike(pattern), CatalogSetModel.description.ilike(pattern)))
        if min_price is not None:
            conditions.append(ProviderSetModel.price >= min_price)
        if max_price is not None:
            conditions.append(ProviderSetModel.price <= max_price)

        base = (
            select(ProviderSetModel, CatalogSetModel, UserModel)
            .join(CatalogSetModel, ProviderSetModel.set_id == CatalogSetModel.id)
            .join(UserModel, ProviderSetModel.provider_id == UserModel.id)
            .where(*conditions)
        )
        total = self.db.execute(
            select(func.count()).select_from(base.subquery())
        ).scalar_one()
        rows = self.db.execute(
            base.order_by(ProviderSetModel.created_at.desc(), ProviderSetModel.id.desc())
            .offset(offset)
            .limit(limit)
        ).all()
        return list(rows), total
