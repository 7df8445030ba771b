from datetime import datetime, timezone
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace.data.models.system_setting import SystemSettingModel


class SettingRepo:
    def __init__(self, db: Session):
        self.db = db

    def all(self) -> List[SystemSettingModel]:
        return list(self.db.execute(select(SystemSettingModel)).scalars().all())

    def get(self, key: str) -> SystemSettingModel | None:
        return self.db.get(SystemSettingModel, key)

    def upsert(self, key: str, value: str, setting_type: str, description: str | None) -> SystemSettingModel:
        setting = self.get(key)
        if setting is None:
            setting = SystemSettingModel(setting_key=key)
            self.db.add(setting)
        setting.setting_value = value
        setting.setting_type = setting_type
        #opis zostaje jesli nie podano nowego
        if description is not None:
            setting.description = description
        setting.updated_at = datetime.now(timezone.utc)
        self.db.flush()
        return setting
