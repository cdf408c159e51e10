from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from foodcity.db.base_class import Base


class OrderStatusHistory(Base):
    """Append-only audit trail of an order's status transitions."""

    __tablename__ = "order_status_history"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    # Stored as the enum value so the trail survives enum renames.
    old_status = Column(String(50), nullable=True)
    new_status = Column(String(50), nullable=False)
    # Null when the transition came from checkout or a payment callback.
    changed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    order = relationship("Order", back_populates="status_history")
