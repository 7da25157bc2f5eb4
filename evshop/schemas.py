"""Request/response models and the enumerations shared with the ORM layer.

API bodies are camelCase (``productId``, ``totalAmount``...); snake_case
field names are accepted on input as well.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class ProductType(str, Enum):
    charger = "Charger"
    cable = "Cable"
    station = "Station"
    adapter = "Adapter"
    box = "Box"
    breaker = "Breaker"
    plug = "Plug"
    wire = "Wire"
    other = "Other"

class OrderStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"

class PaymentMethod(str, Enum):
    cash = "cash"
    instapay = "instapay"
    vodafonecash = "vodafonecash"

class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    failed = "failed"


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# --- cart ---

class CartItemAdd(CamelModel):
    product_id: int
    product_type: str
    quantity: int = 1

class CartItemUpdate(CamelModel):
    product_id: int
    product_type: str
    quantity: int

class CartItemRead(CamelModel):
    product_id: int
    product_type: str
    name: str
    price: float
    quantity: int
    image: str = ""

class CartRead(CamelModel):
    id: int
    session_id: str
    user_id: Optional[str] = None
    items: List[CartItemRead] = []
    total_amount: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# --- orders ---

class OrderItemIn(CamelModel):
    # presence is checked by the order service so the whole request fails with 400
    product_id: Optional[int] = None
    product_type: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[int] = None
    name: Optional[str] = None
    image: Optional[str] = None

class OrderCreate(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None
    payment_method: Optional[str] = None
    session_id: Optional[str] = None
    items: Optional[List[OrderItemIn]] = None

class OrderUpdate(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None
    payment_method: Optional[str] = None
    payment_status: Optional[str] = None

class OrderStatusUpdate(CamelModel):
    status: str

class PaymentStatusUpdate(CamelModel):
    payment_status: str

class OrderItemRead(CartItemRead):
    pass

class OrderRead(CamelModel):
    id: int
    order_number: str
    name: str
    phone: str
    email: Optional[str] = None
    address: str
    items: List[OrderItemRead]
    total_amount: float
    payment_method: str
    payment_status: str
    status: str
    user_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# --- catalog ---

class OfferRead(CamelModel):
    enabled: bool = False
    discount_percentage: float = 0

class ProductRead(CamelModel):
    id: int
    product_type: ProductType
    name: str
    brand: Optional[str] = None
    description: Optional[str] = ""
    price: float
    final_price: float
    stock: int
    images: List[str] = []
    offer: OfferRead

class StockUpdate(CamelModel):
    stock: int
