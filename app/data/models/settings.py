# app/data/models/settings.py
from sqlalchemy import Column, Integer, String, Text

from app.data.database import Base


class AdminSettingsModel(Base):
    __tablename__ = "admin_settings"

    id = Column(Integer, primary_key=True)
    company_name = Column(String(200), nullable=True)
    hero_title = Column(String(200), nullable=True)
    hero_subtitle = Column(Text, nullable=True)
    hero_image_url = Column(String, nullable=True)
    logo_url = Column(String, nullable=True)
    footer_text = Column(Text, nullable=True)
