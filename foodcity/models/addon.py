from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, Text, JSON
from datetime import datetime
from foodcity.db.base_class import Base


class AddOn(Base):
    __tablename__ = "addons"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=False)
    price = Column(Float, nullable=False, index=True)
    image_url = Column(String(500), nullable=True)

    rating = Column(Float, nullable=True)
    rating_count = Column(Integer, nullable=True)
    is_veg = Column(Boolean, default=False, nullable=False)
    is_available = Column(Boolean, default=True, nullable=False)

    is_customizable = Column(Boolean, default=False, nullable=False)
    customizable_options = Column(JSON, default=list, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
