from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from marketplace.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def count(self, conditions: Iterable) -> int:
        return self.db.execute(
            select(func.count()).select_from(UserModel).where(*conditions)
        ).scalar_one()
