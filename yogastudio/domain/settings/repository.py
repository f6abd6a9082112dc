"""Settings repository - key/value business settings"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import BusinessSetting


class SettingsRepository:
    @staticmethod
    def list_settings(db: Session) -> list[BusinessSetting]:
        return db.query(BusinessSetting).order_by(BusinessSetting.key).all()

    @staticmethod
    def get_setting(db: Session, key: str) -> Optional[BusinessSetting]:
        return db.query(BusinessSetting).filter(BusinessSetting.key == key).first()

    @staticmethod
    def upsert(db: Session, key: str, value, updated_by: Optional[str]) -> BusinessSetting:
        setting = SettingsRepository.get_setting(db, key)
        if setting is None:
            setting = BusinessSetting(key=key, value=value, updated_by=updated_by)
            db.add(setting)
        else:
            setting.value = value
            setting.updated_by = updated_by
        return setting
