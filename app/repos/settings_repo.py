# app/repos/settings_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.data.models.settings import AdminSettingsModel


class SettingsRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_settings(self) -> AdminSettingsModel | None:
        stmt = select(AdminSettingsModel).order_by(AdminSettingsModel.id).limit(1)
        return self.db.execute(stmt).scalar_one_or_none()

    def save(self, settings: AdminSettingsModel) -> AdminSettingsModel:
        self.db.add(settings)
        self.db.commit()
        self.db.refresh(settings)
        return settings
