from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Enum, Text, JSON, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
from foodcity.db.base_class import Base


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderPaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class OrderPaymentMethod(str, enum.Enum):
    ONLINE = "online"
    COD = "cod"  # Cash on Delivery


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(50), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    idempotency_key = Column(String(64), nullable=True, index=True)

    # Customer snapshot (copied from the chosen address at checkout)
    customer_name = Column(String(100), nullable=False)
    customer_email = Column(String(255), nullable=True)
    customer_phone = Column(String(15), nullable=False)
    customer_address = Column(Text, nullable=False)
    customer_pincode = Column(String(10), nullable=False)

    # Pricing
    subtotal = Column(Float, default=0.0, nullable=False)
    tax = Column(Float, default=0.0, nullable=False)
    delivery_charge = Column(Float, default=0.0, nullable=False)
    online_discount = Column(Float, default=0.0, nullable=False)
    discount = Column(Float, default=0.0, nullable=False)  # online discount + coupon discount
    coupon_code = Column(String(50), nullable=True)
    total_amount = Column(Float, nullable=False)

    # Status
    status = Column(Enum(OrderStatus), default=OrderStatus.PENDING, nullable=False, index=True)
    payment_status = Column(Enum(OrderPaymentStatus), default=OrderPaymentStatus.PENDING, nullable=False)
    payment_method = Column(Enum(OrderPaymentMethod), default=OrderPaymentMethod.ONLINE, nullable=False)
    cancellation_reason = Column(Text, nullable=True)

    customer_notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
    addons = relationship("OrderAddon", back_populates="order", cascade="all, delete-orphan")
    payment = relationship("Payment", back_populates="order", uselist=False)
    status_history = relationship("OrderStatusHistory", back_populates="order", cascade="all, delete-orphan", order_by="OrderStatusHistory.created_at")

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items) + sum(addon.quantity for addon in self.addons)


Index("ix_orders_user_created_at", Order.user_id, Order.created_at)
Index("ix_orders_status_created_at", Order.status, Order.created_at)


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    title = Column(String(100), nullable=False)  # Snapshot at order time
    slug = Column(String(150), nullable=True)
    image_url = Column(String(500), nullable=True)
    selected_customization = Column(JSON, nullable=True)  # {"option": ..., "price": ...}

    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)  # Unit price

    # Relationships
    order = relationship("Order", back_populates="items")
    product = relationship("Product")


class OrderAddon(Base):
    __tablename__ = "order_addons"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    addon_id = Column(Integer, ForeignKey("addons.id"), nullable=False)

    name = Column(String(100), nullable=False)
    image = Column(String(500), nullable=True)
    selected_customization = Column(JSON, nullable=True)

    quantity = Column(Integer, default=1, nullable=False)
    price = Column(Float, nullable=False)  # Unit price

    # Relationships
    order = relationship("Order", back_populates="addons")
    addon = relationship("AddOn")
