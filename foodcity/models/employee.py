from sqlalchemy import Column, Integer, String, DateTime, Text
from datetime import datetime
from foodcity.db.base_class import Base


class Employee(Base):
    """Kitchen and delivery staff managed from the back office."""

    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=True)
    phone = Column(String(15), unique=True, nullable=False, index=True)
    whatsapp = Column(String(15), unique=True, nullable=False, index=True)
    address = Column(Text, nullable=False)
    avatar_url = Column(String(500), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
