from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text

from marketplace.data.database import Base


class SystemSettingModel(Base):
    __tablename__ = "system_settings"

    setting_key = Column(String(100), primary_key=True)
    setting_value = Column(Text, nullable=False)
    setting_type = Column(String(20), nullable=False, default="string")  # string, number, boolean, json
    description = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
