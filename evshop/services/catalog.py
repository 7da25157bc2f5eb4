"""Catalog lookups and stock mutation used by the cart and order services.

Stock is authoritative here. Every mutation is a single UPDATE statement so
concurrent requests cannot lose each other's decrements.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from evshop.core.errors import InvalidRequest, NotFound
from evshop.db.models import PRODUCT_MODELS, ProductMixin
from evshop.schemas import ProductType

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def parse_product_type(value) -> ProductType:
    try:
        return ProductType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in ProductType)
        raise InvalidRequest(f"Invalid product type. Must be one of: {allowed}")


def model_for(product_type: ProductType):
    return PRODUCT_MODELS[product_type]


def get_product(db: Session, product_type: ProductType, product_id: int) -> ProductMixin | None:
    return db.get(model_for(product_type), product_id)


def get_product_or_404(db: Session, product_type: ProductType, product_id: int) -> ProductMixin:
    product = get_product(db, product_type, product_id)
    if product is None:
        raise NotFound("Product not found")
    return product


def list_products(db: Session, product_type: ProductType, limit: int = 50, offset: int = 0):
    model = model_for(product_type)
    stmt = select(model).order_by(model.id).offset(offset).limit(limit)
    return db.execute(stmt).scalars().all()


def effective_price(product: ProductMixin) -> Decimal:
    price = Decimal(str(product.price))
    pct = Decimal(str(product.offer_discount_percentage or 0))
    if product.offer_enabled and pct > 0:
        price = price - price * pct / 100
    return price.quantize(CENT, rounding=ROUND_HALF_UP)


def first_image(product: ProductMixin) -> str:
    images = product.images or []
    if not images:
        return ""
    img = images[0]
    if isinstance(img, dict):
        return str(img.get("url") or "")
    return str(img)


def set_stock(db: Session, product_type: ProductType, product_id: int, new_stock: int) -> ProductMixin:
    if new_stock < 0:
        raise InvalidRequest("Stock cannot be negative")
    product = get_product_or_404(db, product_type, product_id)
    product.stock = new_stock
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info("stock for %s %s set to %s", product_type.value, product_id, new_stock)
    return product


def decrement_stock(db: Session, product_type: ProductType, product_id: int, qty: int) -> bool:
    """Take ``qty`` units off the product only if that many are in stock.

    Returns False when the product is gone or holds fewer than ``qty`` units,
    in which case nothing changes. The caller owns the transaction.
    """
    model = model_for(product_type)
    stmt = (
        update(model)
        .where(model.id == product_id, model.stock >= qty)
        .values(stock=model.stock - qty)
        .execution_options(synchronize_session=False)
    )
    return db.execute(stmt).rowcount > 0


def current_stock(db: Session, product_type: ProductType, product_id: int) -> int | None:
    model = model_for(product_type)
    return db.execute(select(model.stock).where(model.id == product_id)).scalar_one_or_none()


def restore_stock(db: Session, product_type: ProductType, product_id: int, qty: int) -> bool:
    """Give ``qty`` units back to the product. No upper bound is applied."""
    model = model_for(product_type)
    stmt = (
        update(model)
        .where(model.id == product_id)
        .values(stock=model.stock + qty)
        .execution_options(synchronize_session=False)
    )
    return db.execute(stmt).rowcount > 0
