from sqlalchemy import Column, Integer, String, DateTime, Text
from datetime import datetime
from foodcity.db.base_class import Base

DEFAULT_COMPANY_NAME = "The Food City"


class CompanySettings(Base):
    """Restaurant profile shown on invoices, emails and the storefront. Single row."""

    __tablename__ = "company_settings"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), default=DEFAULT_COMPANY_NAME, nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(15), nullable=True)
    address = Column(Text, nullable=True)
    logo_url = Column(String(500), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
