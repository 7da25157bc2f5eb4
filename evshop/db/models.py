from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, Text, Boolean, ForeignKey, Numeric, DateTime, JSON
from datetime import datetime
from decimal import Decimal
from evshop.db.session import Base
from evshop.schemas import ProductType, OrderStatus, PaymentMethod, PaymentStatus

Money = Numeric(12, 2)

def utcnow() -> datetime: return datetime.utcnow()


# --- catalog ---

class ProductMixin:
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(240), nullable=False)
    brand: Mapped[str | None] = mapped_column(String(120), nullable=True)
    description: Mapped[str] = mapped_column(Text, default="")
    price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    images: Mapped[list] = mapped_column(JSON, default=list)
    offer_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    offer_discount_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(), default=utcnow, onupdate=utcnow)

class Charger(ProductMixin, Base):
    __tablename__ = "chargers"
    power_kw: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    connector_type: Mapped[str | None] = mapped_column(String(64), nullable=True)

class Cable(ProductMixin, Base):
    __tablename__ = "cables"
    connector_from: Mapped[str | None] = mapped_column(String(64), nullable=True)
    connector_to: Mapped[str | None] = mapped_column(String(64), nullable=True)
    cable_length: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    wire_gauge: Mapped[str | None] = mapped_column(String(32), nullable=True)

class Station(ProductMixin, Base):
    __tablename__ = "stations"
    connector_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    amperage: Mapped[str | None] = mapped_column(String(32), nullable=True)
    phase: Mapped[str | None] = mapped_column(String(32), nullable=True)

class Adapter(ProductMixin, Base):
    __tablename__ = "adapters"
    voltage: Mapped[str | None] = mapped_column(String(32), nullable=True)
    current: Mapped[str | None] = mapped_column(String(32), nullable=True)

class Box(ProductMixin, Base):
    __tablename__ = "boxes"
    size: Mapped[str | None] = mapped_column(String(64), nullable=True)

class Breaker(ProductMixin, Base):
    __tablename__ = "breakers"
    ampere: Mapped[str | None] = mapped_column(String(32), nullable=True)
    voltage: Mapped[str | None] = mapped_column(String(32), nullable=True)

class Plug(ProductMixin, Base):
    __tablename__ = "plugs"
    connector_type: Mapped[str | None] = mapped_column(String(64), nullable=True)

class Wire(ProductMixin, Base):
    __tablename__ = "wires"
    wire_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    length: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)

class Other(ProductMixin, Base):
    __tablename__ = "other_products"

# one table per ProductType
PRODUCT_MODELS = {
    ProductType.charger: Charger,
    ProductType.cable: Cable,
    ProductType.station: Station,
    ProductType.adapter: Adapter,
    ProductType.box: Box,
    ProductType.breaker: Breaker,
    ProductType.plug: Plug,
    ProductType.wire: Wire,
    ProductType.other: Other,
}

# --- cart ---

class Cart(Base):
    __tablename__ = "carts"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    session_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    user_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    total_amount: Mapped[Decimal] = mapped_column(Money, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(), default=utcnow, onupdate=utcnow)

    items = relationship("CartItem", back_populates="cart", cascade="all, delete-orphan", order_by="CartItem.id")

    def recalculate_total(self) -> Decimal:
        self.total_amount = sum((Decimal(str(it.price)) * it.quantity for it in self.items), Decimal("0"))
        return self.total_amount

class CartItem(Base):
    __tablename__ = "cart_items"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    cart_id: Mapped[int] = mapped_column(ForeignKey("carts.id", ondelete="CASCADE"))
    product_id: Mapped[int] = mapped_column(Integer, nullable=False)
    product_type: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str] = mapped_column(String(240), nullable=False)
    price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    image: Mapped[str] = mapped_column(String(1024), default="")

    cart = relationship("Cart", back_populates="items")


# --- orders ---

class Order(Base):
    __tablename__ = "orders"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(240), nullable=False)
    phone: Mapped[str] = mapped_column(String(32), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    payment_method: Mapped[str] = mapped_column(String(32), default=PaymentMethod.cash.value)
    payment_status: Mapped[str] = mapped_column(String(32), default=PaymentStatus.pending.value)
    status: Mapped[str] = mapped_column(String(32), default=OrderStatus.pending.value)
    user_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(), default=utcnow, onupdate=utcnow)

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id")

class OrderItem(Base):
    __tablename__ = "order_items"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"))
    product_id: Mapped[int] = mapped_column(Integer, nullable=False)
    product_type: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str] = mapped_column(String(240), nullable=False)
    price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    image: Mapped[str] = mapped_column(String(1024), default="")

    order = relationship("Order", back_populates="items")
