"""Session-keyed shopping cart.

Carts hold snapshots (name, price, image) of the products taken when a line
is added or touched; the catalog is not joined live. Stock is checked
against the catalog on every add/update but never reserved.

Every mutation goes through ``_save`` which recomputes ``total_amount`` from
the full item list before committing.
"""
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from evshop.core.errors import InsufficientStock, InvalidRequest, NotFound
from evshop.db.models import Cart, CartItem
from evshop.schemas import ProductType
from evshop.services import catalog
from evshop.store.session_lock import session_lock

logger = logging.getLogger(__name__)

SENTINEL_SESSION_IDS = ("undefined", "null")


def is_valid_session_id(session_id) -> bool:
    if not isinstance(session_id, str):
        return False
    sid = session_id.strip()
    return bool(sid) and sid not in SENTINEL_SESSION_IDS


def validate_session_id(session_id) -> str:
    if not is_valid_session_id(session_id):
        raise InvalidRequest("Valid session ID is required")
    return session_id.strip()


def validate_quantity(quantity) -> int:
    try:
        qty = int(quantity)
    except (TypeError, ValueError):
        raise InvalidRequest("Quantity must be at least 1")
    if qty < 1:
        raise InvalidRequest("Quantity must be at least 1")
    return qty


def find_cart(db: Session, session_id: str) -> Cart | None:
    return db.execute(select(Cart).where(Cart.session_id == session_id)).scalar_one_or_none()


def _cart_or_404(db: Session, session_id: str) -> Cart:
    cart = find_cart(db, session_id)
    if cart is None:
        raise NotFound("Cart not found")
    return cart


def _find_line(cart: Cart, product_id: int, product_type: ProductType) -> CartItem | None:
    for it in cart.items:
        if it.product_id == product_id and it.product_type == product_type.value:
            return it
    return None


def _save(db: Session, cart: Cart) -> Cart:
    cart.recalculate_total()
    db.add(cart)
    db.commit()
    db.refresh(cart)
    return cart


def _create_cart(db: Session, session_id: str) -> Cart:
    cart = Cart(session_id=session_id, total_amount=0)
    db.add(cart)
    try:
        db.commit()
    except IntegrityError:
        # another request created it first; session_id is unique
        db.rollback()
        return _cart_or_404(db, session_id)
    db.refresh(cart)
    logger.info("new cart created for session %s", session_id)
    return cart


def get_or_create_cart(db: Session, session_id: str) -> Cart:
    sid = validate_session_id(session_id)
    cart = find_cart(db, sid)
    if cart is None:
        cart = _create_cart(db, sid)
    return cart


def add_item(db: Session, session_id: str, product_id: int, product_type, quantity=1) -> Cart:
    sid = validate_session_id(session_id)
    ptype = catalog.parse_product_type(product_type)
    qty = validate_quantity(quantity)

    with session_lock(sid):
        product = catalog.get_product_or_404(db, ptype, product_id)
        if product.stock < qty:
            raise InsufficientStock(f"Insufficient stock. Available: {product.stock}")

        cart = get_or_create_cart(db, sid)
        price = catalog.effective_price(product)
        line = _find_line(cart, product_id, ptype)
        if line is not None:
            new_qty = line.quantity + qty
            if product.stock < new_qty:
                raise InsufficientStock(
                    f"Insufficient stock. You have {line.quantity} in cart. Available: {product.stock}"
                )
            line.quantity = new_qty
            line.price = price
            line.name = product.name
        else:
            cart.items.append(CartItem(
                product_id=product_id,
                product_type=ptype.value,
                name=product.name,
                price=price,
                quantity=qty,
                image=catalog.first_image(product),
            ))
        return _save(db, cart)


def update_item(db: Session, session_id: str, product_id: int, product_type, quantity) -> Cart:
    sid = validate_session_id(session_id)
    ptype = catalog.parse_product_type(product_type)
    qty = validate_quantity(quantity)

    with session_lock(sid):
        cart = _cart_or_404(db, sid)
        line = _find_line(cart, product_id, ptype)
        if line is None:
            raise NotFound("Item not found in cart")
        product = catalog.get_product_or_404(db, ptype, product_id)
        if product.stock < qty:
            raise InsufficientStock(f"Insufficient stock. Available: {product.stock}")
        line.quantity = qty
        line.price = catalog.effective_price(product)
        line.name = product.name
        return _save(db, cart)


def remove_item(db: Session, session_id: str, product_id: int, product_type) -> Cart:
    sid = validate_session_id(session_id)
    ptype = catalog.parse_product_type(product_type)

    with session_lock(sid):
        cart = _cart_or_404(db, sid)
        line = _find_line(cart, product_id, ptype)
        if line is None:
            raise NotFound("Item not found in cart")
        cart.items.remove(line)
        return _save(db, cart)


def empty_cart(db: Session, cart: Cart) -> Cart:
    cart.items.clear()
    return _save(db, cart)


def clear_cart(db: Session, session_id: str) -> Cart:
    sid = validate_session_id(session_id)
    with session_lock(sid):
        return empty_cart(db, _cart_or_404(db, sid))
