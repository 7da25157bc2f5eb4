"""Checkout, order lifecycle and the stock bookkeeping tied to it.

Customer fields, the item source and live stock are checked before the
order row is written. The order insert and the conditional stock decrements
share one transaction, so either both land or neither does. Cart clearing
and event publishing after the commit are best-effort: failures are logged
and never surface to the caller. Deleting an order restores stock the same
best-effort way before the row is removed.
"""
import logging
import random
import re
import time
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from evshop.core.config import settings
from evshop.core.errors import EmptyCart, InsufficientStock, InvalidRequest, NotFound
from evshop.db.models import Order, OrderItem
from evshop.events.producer import order_event, publish
from evshop.schemas import OrderCreate, OrderStatus, OrderUpdate, PaymentMethod, PaymentStatus, ProductType
from evshop.services import cart as carts
from evshop.services import catalog
from evshop.store.session_lock import session_lock

logger = logging.getLogger(__name__)

PHONE_RE = re.compile(r"^01\d{9}$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


# ---------- field validation ----------

def normalize_phone(phone: str) -> str:
    return re.sub(r"[\s\-]", "", phone)

def validate_phone(phone) -> str:
    if not isinstance(phone, str) or not PHONE_RE.match(normalize_phone(phone)):
        raise InvalidRequest("Invalid phone number. Must be Egyptian format (01XXXXXXXXX)")
    return normalize_phone(phone)

def validate_email(email) -> str | None:
    """Blank means no email; anything else has to look like an address."""
    if email is None or not email.strip():
        return None
    email = email.strip()
    if not EMAIL_RE.match(email):
        raise InvalidRequest("Invalid email format")
    return email.lower()

def _required_text(value, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequest(message)
    return value.strip()

def _optional_text(value) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip()

def parse_payment_method(value) -> PaymentMethod:
    if value is None or value == "":
        return PaymentMethod.cash
    try:
        return PaymentMethod(value)
    except ValueError:
        raise InvalidRequest("Invalid payment method. Choose: cash, instapay, or vodafonecash")

def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise InvalidRequest(f"Invalid status. Must be one of: {allowed}")

def parse_payment_status(value) -> PaymentStatus:
    try:
        return PaymentStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in PaymentStatus)
        raise InvalidRequest(f"Invalid payment status. Must be one of: {allowed}")


def generate_order_number() -> str:
    timestamp = str(int(time.time() * 1000))[-8:]
    return f"ORD-{timestamp}-{random.randint(0, 999):03d}"


# ---------- checkout ----------

def _customer_fields(payload: OrderCreate) -> dict:
    if not all(isinstance(v, str) and v.strip() for v in (payload.name, payload.phone, payload.address)):
        raise InvalidRequest("Please provide name, phone, and address")
    return {
        "name": payload.name.strip(),
        "phone": validate_phone(payload.phone),
        "address": payload.address.strip(),
        "email": validate_email(payload.email),
        "notes": _optional_text(payload.notes),
        "payment_method": parse_payment_method(payload.payment_method).value,
    }


def _lines_from_cart(cart) -> list[dict]:
    return [
        {
            "product_id": it.product_id,
            "product_type": catalog.parse_product_type(it.product_type),
            "name": it.name,
            "price": Decimal(str(it.price)),
            "quantity": it.quantity,
            "image": it.image or "",
        }
        for it in cart.items
    ]


def _lines_from_payload(items) -> list[dict]:
    lines = []
    for it in items:
        if it.product_id is None or not it.product_type or not it.price or not it.quantity:
            raise InvalidRequest("Each item must have productId, productType, price, and quantity")
        price = Decimal(str(it.price))
        if price < 0 or it.quantity < 1:
            raise InvalidRequest("Item price cannot be negative and quantity must be at least 1")
        lines.append({
            "product_id": it.product_id,
            "product_type": catalog.parse_product_type(it.product_type),
            "name": it.name,
            "price": price,
            "quantity": it.quantity,
            "image": it.image,
        })
    return lines


def order_total(lines) -> Decimal:
    return sum((line["price"] * line["quantity"] for line in lines), Decimal("0"))


def _demand(lines: list[dict]) -> dict[tuple[ProductType, int], int]:
    # repeated lines for one product add up
    wanted: dict[tuple[ProductType, int], int] = {}
    for line in lines:
        key = (line["product_type"], line["product_id"])
        wanted[key] = wanted.get(key, 0) + line["quantity"]
    return wanted


def _insufficient(name: str, available, requested: int) -> InsufficientStock:
    return InsufficientStock(f"Insufficient stock for {name}. Available: {available or 0}, requested: {requested}")


def _verify_stock(db: Session, lines: list[dict]) -> None:
    # optimistic pre-check only; _reserve_stock is the guarantee
    products = {}
    for line in lines:
        key = (line["product_type"], line["product_id"])
        if key not in products:
            product = catalog.get_product(db, *key)
            if product is None:
                raise NotFound(f"Product not found: {key[0].value} {key[1]}")
            products[key] = product
        product = products[key]
        if not line["name"]:
            line["name"] = product.name or "Product"
        if line["image"] is None:
            line["image"] = catalog.first_image(product)
    for key, qty in _demand(lines).items():
        if products[key].stock < qty:
            raise _insufficient(products[key].name, products[key].stock, qty)


def _reserve_stock(db: Session, lines: list[dict]) -> None:
    """Take every line's stock inside the caller's transaction.

    Each product is decremented with a conditional UPDATE, so a concurrent
    checkout that got there first makes this one fail instead of overselling.
    On failure the whole transaction, order row included, is rolled back.
    """
    wanted = _demand(lines)
    names = {(line["product_type"], line["product_id"]): line["name"] for line in lines}
    for key in sorted(wanted, key=lambda k: (k[0].value, k[1])):
        if catalog.decrement_stock(db, key[0], key[1], wanted[key]):
            continue
        db.rollback()
        available = catalog.current_stock(db, *key)
        logger.warning(
            "checkout rejected, stock taken concurrently: product=%s/%s available=%s requested=%s",
            key[0].value, key[1], available, wanted[key],
        )
        raise _insufficient(names[key], available, wanted[key])


def _insert_order(db: Session, fields: dict, lines: list[dict], total: Decimal, user_id: str | None) -> Order:
    for _ in range(max(1, settings.ORDER_NUMBER_ATTEMPTS)):
        number = generate_order_number()
        order = Order(
            order_number=number,
            total_amount=total,
            status=OrderStatus.pending.value,
            payment_status=PaymentStatus.pending.value,
            user_id=user_id,
            items=[
                OrderItem(
                    product_id=line["product_id"],
                    product_type=line["product_type"].value,
                    name=line["name"],
                    price=line["price"],
                    quantity=line["quantity"],
                    image=line["image"] or "",
                )
                for line in lines
            ],
            **fields,
        )
        db.add(order)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            logger.warning("order number %s already taken, generating another", number)
            continue
        try:
            _reserve_stock(db, lines)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(order)
        return order
    raise RuntimeError("Could not allocate a unique order number")


def _line_keys(order: Order) -> list[tuple[int, str, int]]:
    return [(it.product_id, it.product_type, it.quantity) for it in order.items]


def _checkout(db: Session, fields: dict, session_id: str | None, items, user_id: str | None) -> Order:
    cart = None
    if session_id:
        cart = carts.find_cart(db, session_id)
        if cart is None or not cart.items:
            raise EmptyCart("Cart is empty. Please add items before creating an order.")
        lines = _lines_from_cart(cart)
    elif items:
        lines = _lines_from_payload(items)
    else:
        raise InvalidRequest("Please provide items or sessionId")

    total = order_total(lines)
    if total <= 0:
        raise InvalidRequest("Order total amount must be greater than 0")

    _verify_stock(db, lines)

    order = _insert_order(db, fields, lines, total, user_id)
    logger.info("order %s created with %d item(s), total %s", order.order_number, len(lines), total)

    if cart is not None:
        try:
            carts.empty_cart(db, cart)
        except Exception:
            db.rollback()
            logger.exception("could not clear cart %s after order %s", session_id, order.order_number)

    db.refresh(order)
    publish(order_event("order.created", order))
    return order


def create_order(db: Session, payload: OrderCreate, user_id: str | None = None) -> Order:
    fields = _customer_fields(payload)
    session_id = payload.session_id.strip() if carts.is_valid_session_id(payload.session_id) else None
    if session_id is None:
        return _checkout(db, fields, None, payload.items, user_id)
    with session_lock(session_id):
        return _checkout(db, fields, session_id, None, user_id)


# ---------- queries ----------

def get_order(db: Session, order_id: int) -> Order:
    order = db.get(Order, order_id)
    if order is None:
        raise NotFound("Order not found")
    return order

def get_order_by_number(db: Session, order_number: str) -> Order:
    order = db.execute(select(Order).where(Order.order_number == order_number)).scalar_one_or_none()
    if order is None:
        raise NotFound("Order not found")
    return order

def list_orders(db: Session, status: str | None = None, limit: int = 50, offset: int = 0):
    stmt = select(Order)
    if status is not None:
        stmt = stmt.where(Order.status == parse_status(status).value)
    stmt = stmt.order_by(Order.created_at.desc(), Order.id.desc()).offset(offset).limit(limit)
    return db.execute(stmt).scalars().all()

def list_user_orders(db: Session, user_id: str):
    stmt = select(Order).where(Order.user_id == user_id).order_by(Order.created_at.desc(), Order.id.desc())
    return db.execute(stmt).scalars().all()


# ---------- lifecycle ----------
# status and payment_status accept any enumerated value from any other one

def update_status(db: Session, order_id: int, status) -> Order:
    new_status = parse_status(status)
    order = get_order(db, order_id)
    previous = order.status
    order.status = new_status.value
    db.add(order); db.commit(); db.refresh(order)
    publish(order_event("order.status_changed", order, previous_status=previous))
    return order

def update_payment_status(db: Session, order_id: int, payment_status) -> Order:
    new_status = parse_payment_status(payment_status)
    order = get_order(db, order_id)
    previous = order.payment_status
    order.payment_status = new_status.value
    db.add(order); db.commit(); db.refresh(order)
    publish(order_event("order.payment_status_changed", order, previous_payment_status=previous))
    return order

def update_order(db: Session, order_id: int, payload: OrderUpdate) -> Order:
    data = payload.model_dump(exclude_unset=True)
    changes = {}
    if data.get("name") is not None:
        changes["name"] = _required_text(data["name"], "Name cannot be empty")
    if data.get("phone") is not None:
        changes["phone"] = validate_phone(data["phone"])
    if "email" in data:
        changes["email"] = validate_email(data["email"])
    if data.get("address") is not None:
        changes["address"] = _required_text(data["address"], "Address cannot be empty")
    if "notes" in data:
        changes["notes"] = _optional_text(data["notes"])
    if data.get("status") is not None:
        changes["status"] = parse_status(data["status"]).value
    if data.get("payment_method") is not None:
        changes["payment_method"] = parse_payment_method(data["payment_method"]).value
    if data.get("payment_status") is not None:
        changes["payment_status"] = parse_payment_status(data["payment_status"]).value

    order = get_order(db, order_id)
    for k, v in changes.items():
        setattr(order, k, v)
    db.add(order); db.commit(); db.refresh(order)
    return order

def delete_order(db: Session, order_id: int) -> None:
    order = get_order(db, order_id)
    number = order.order_number
    event = order_event("order.deleted", order)

    for product_id, product_type, qty in _line_keys(order):
        try:
            found = catalog.restore_stock(db, ProductType(product_type), product_id, qty)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception(
                "stock restore failed: order=%s product=%s/%s quantity=%s",
                number, product_type, product_id, qty,
            )
            continue
        if not found:
            logger.error(
                "stock restore skipped, product gone: order=%s product=%s/%s quantity=%s",
                number, product_type, product_id, qty,
            )

    db.delete(order)
    db.commit()
    logger.info("order %s deleted", number)
    publish(event)
