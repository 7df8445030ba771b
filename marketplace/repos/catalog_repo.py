from typing import Iterable, List, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from marketplace.data.models.catalog_set import CatalogSetModel


class CatalogRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_set(self, set_id: int) -> CatalogSetModel | None:
        return self.db.get(CatalogSetModel, set_id)

    def create_set(self, catalog_set: CatalogSetModel) -> CatalogSetModel:
        self.db.add(catalog_set)
        self.db.flush()
        return catalog_set

    def count_sets(self, conditions: Iterable) -> int:
        return self.db.execute(
            select(func.count()).select_from(CatalogSetModel).where(*conditions)
        ).scalar_one()

    def list_sets(self, conditions: list, offset: int, limit: int) -> Tuple[List[CatalogSetModel], int]:
        total = self.db.execute(
            select(func.count()).select_from(CatalogSetModel).where(*conditions)
        ).scalar_one()
        rows = self.db.execute(
            select(CatalogSetModel)
            .where(*conditions)
            .order_by(CatalogSetModel.name, CatalogSetModel.id)
            .offset(offset)
            .limit(limit)
        ).scalars().all()
        return list(rows), total
