# marketplace/data/seed.py
from decimal import Decimal

from sqlalchemy.orm import sessionmaker

from marketplace.data.database import SessionLocal, init_db, transaction
from marketplace.data.models import (
    CatalogSetModel,
    ProviderSetModel,
    SystemSettingModel,
    UserModel,
)
from marketplace.domain.policy import Role
from marketplace.services.identity_service import IdentityResolver
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

USERS = [
    ("admin", Role.ADMIN, None),
    ("maker-supplies", Role.PROVIDER, "Maker Supplies Ltd"),
    ("jane", Role.CUSTOMER, None),
    ("print-room", Role.PRODUCTION, None),
]

SETTINGS = [
    ("site_name", "MakerSet Marketplace", "string", "Nazwa sklepu"),
    ("orders_enabled", "true", "boolean", "Czy checkout jest wlaczony"),
    ("max_items_per_order", "50", "number", None),
]


def seed(session_factory: sessionmaker = SessionLocal) -> list[UserModel]:
    """Dane demo. Id nadaje baza, zeby sekwencje (SERIAL) szly dalej po seedzie."""
    init_db(session_factory.kw.get("bind"))
    db = session_factory()
    try:
        # seed tylko na pustej bazie
        if db.query(UserModel).first():
            logger.info("Database already seeded, skipping")
            return []

        with transaction(db):
            users = [
                UserModel(username=username, role=role.value, company_name=company)
                for username, role, company in USERS
            ]
            provider = users[1]

            robot = CatalogSetModel(name="Robot Arm Kit", category="robotics", base_price=Decimal("49.00"))
            circuit = CatalogSetModel(name="Circuit Starter", category="electronics", base_price=Decimal("19.00"))
            db.add_all(users + [robot, circuit])
            db.flush()

            db.add_all([
                ProviderSetModel(provider_id=provider.id, set_id=robot.id, price=Decimal("54.90"),
                                 available_quantity=25, admin_status="approved"),
                ProviderSetModel(provider_id=provider.id, set_id=circuit.id, price=Decimal("21.50"),
                                 available_quantity=100, admin_status="approved"),
            ])

            for key, value, setting_type, description in SETTINGS:
                db.add(SystemSettingModel(setting_key=key, setting_value=value,
                                          setting_type=setting_type, description=description))

        resolver = IdentityResolver()
        for user in users:
            logger.info(f"Dev token for {user.username} ({user.role}): {resolver.issue_token(user.id, Role(user.role))}")
        return users
    finally:
        db.close()


if __name__ == "__main__":
    seed()
