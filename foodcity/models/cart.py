from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from foodcity.db.base_class import Base


class CartSnapshot(Base):
    """Serialized line items for one cart storage key of one user."""
    __tablename__ = "cart_snapshots"
    __table_args__ = (
        UniqueConstraint("user_id", "storage_key", name="uq_cart_snapshots_user_key"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    storage_key = Column(String(50), nullable=False)  # "cart-storage", "addon-cart-storage"
    schema_version = Column(Integer, default=1, nullable=False)
    items = Column(JSON, default=list, nullable=False)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="cart_snapshots")
