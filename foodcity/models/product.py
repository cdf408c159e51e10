from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, Text, JSON, Enum, Index
from datetime import datetime
import enum
from foodcity.db.base_class import Base


class FoodCategory(str, enum.Enum):
    INDIAN = "indian"
    CHINESE = "chinese"
    SOUTH_INDIAN = "south-indian"
    TANDOOR = "tandoor"


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)

    title = Column(String(100), nullable=False, index=True)
    slug = Column(String(150), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=False)

    # Pricing
    price = Column(Float, nullable=True)
    discounted_price = Column(Float, nullable=True)

    category = Column(Enum(FoodCategory, values_callable=lambda e: [m.value for m in e]), nullable=False)
    image_url = Column(String(500), nullable=True)

    # Ratings
    rating = Column(Float, default=0.0, nullable=False)
    rating_count = Column(Integer, default=0, nullable=False)

    # Menu flags
    is_available = Column(Boolean, default=True, nullable=False)
    is_best_seller = Column(Boolean, default=False, nullable=False)
    is_veg = Column(Boolean, default=True, nullable=False)
    spicy_level = Column(Integer, default=0, nullable=False)  # 0-3
    prep_time = Column(String(20), default="30 min")

    # Customization: [{"option": "Large", "price": 150.0}, ...]
    is_customizable = Column(Boolean, default=False, nullable=False)
    customizable_options = Column(JSON, default=list, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def discount_percentage(self) -> int:
        if self.discounted_price and self.price and self.price > self.discounted_price:
            return round(((self.price - self.discounted_price) / self.price) * 100)
        return 0

# Composite indexes for menu filtering
Index('idx_product_category_available', Product.category, Product.is_available)
Index('idx_product_category_veg', Product.category, Product.is_veg, Product.is_available)
