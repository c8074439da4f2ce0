# app/data/models/order.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, Text, DateTime
from sqlalchemy.orm import relationship

from app.data.database import Base


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    order_number = Column(Integer, nullable=False, unique=True)

    status = Column(String(30), nullable=False, default="pending")
    total_amount = Column(Integer, nullable=False)
    delivery_fee = Column(Integer, nullable=False)

    customer_first_name = Column(String(100), nullable=False)
    customer_last_name = Column(String(100), nullable=False)
    customer_phone = Column(String(40), nullable=False)  # as entered
    customer_phone_normalized = Column(String(40), nullable=False, index=True)
    customer_address = Column(Text, nullable=False)

    payment_method = Column(String(30), nullable=False)
    payment_status = Column(String(20), nullable=True)  # null for legacy rows
    payment_transaction_id = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    #no FK: the snapshot outlives the product
    product_id = Column(Integer, nullable=False)

    product_name = Column(String(200), nullable=False)
    product_image_url = Column(String, nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Integer, nullable=False)
    total_price = Column(Integer, nullable=False)
    color_variant = Column(String(100), nullable=True)
    size_variant = Column(String(100), nullable=True)

    order = relationship("OrderModel", back_populates="items")
