from sqlalchemy import Column, Integer, String, Float, DateTime, Boolean, Enum, Text, JSON
from datetime import datetime
import enum
from foodcity.db.base_class import Base


class DiscountType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class Coupon(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, nullable=False, index=True)  # Always upper-case
    description = Column(Text, nullable=True)
    offer_image = Column(String(500), nullable=True)

    discount_type = Column(Enum(DiscountType), nullable=False, index=True)
    discount_value = Column(Float, nullable=False)  # Percentage (0-100) or fixed amount per unit

    applicable_product_ids = Column(JSON, default=list, nullable=False)

    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)

    usage_limit = Column(Integer, nullable=True)  # Global usage limit
    used_count = Column(Integer, default=0, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
