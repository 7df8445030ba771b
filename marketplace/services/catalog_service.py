# marketplace/services/catalog_service.py
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.data.database import transaction
from marketplace.data.models.catalog_set import CatalogSetModel
from marketplace.domain.errors import NotFoundError, StorageError
from marketplace.domain.policy import Action, Identity, ensure_allowed
from marketplace.domain.schemas import CatalogSetCreate, CatalogSetOut
from marketplace.repos.catalog_repo import CatalogRepo
from marketplace.utils.logging import get_logger
from marketplace.utils.pagination import Page, paginated

logger = get_logger(__name__)


class CatalogService:
    """Zestawy z katalogu, tylko to czego potrzebuja oferty i sklep."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CatalogRepo(db)

    def list_sets(
        self,
        identity: Identity | None,
        page: Page,
        category: str | None = None,
        search: str | None = None,
    ) -> dict:
        conditions = []
        if identity is None or not identity.is_admin:
            conditions.append(CatalogSetModel.admin_visible.is_(True))
        if category:
            conditions.append(CatalogSetModel.category == category)
        if search:
            pattern = f"%{search}%"
            conditions.append(or_(CatalogSetModel.name.ilike(pattern), CatalogSetModel.description.ilike(pattern)))

        rows, total = self.repo.list_sets(conditions, page.offset, page.limit)
        return paginated([CatalogSetOut.model_validate(r) for r in rows], page, total)

    def get_set(self, identity: Identity | None, set_id: int) -> CatalogSetOut:
        catalog_set = self.repo.get_set(set_id)
        hidden = catalog_set is not None and not catalog_set.admin_visible
        if not catalog_set or (hidden and (identity is None or not identity.is_admin)):
            raise NotFoundError("Set")
        return CatalogSetOut.model_validate(catalog_set)

    def create_set(self, identity: Identity, payload: CatalogSetCreate) -> CatalogSetOut:
        ensure_allowed(Action.SET_CREATE, identity, message="Access denied. Required role: admin")

        catalog_set = CatalogSetModel(**payload.model_dump())
        try:
            with transaction(self.db):
                self.repo.create_set(catalog_set)
        except IntegrityError as e:
            logger.error(f"Set insert failed: {e.orig}")
            raise StorageError("Could not create set")

        logger.info(f"Set {catalog_set.id} created")
        return CatalogSetOut.model_validate(catalog_set)
