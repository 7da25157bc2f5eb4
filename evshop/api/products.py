from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from evshop.api.deps import get_db
from evshop.core.auth import require_admin
from evshop.schemas import OfferRead, ProductRead, ProductType, StockUpdate
from evshop.services import catalog

router = APIRouter()

def to_read(product_type: ProductType, obj) -> ProductRead:
    return ProductRead(
        id=obj.id,
        product_type=product_type,
        name=obj.name,
        brand=obj.brand,
        description=obj.description,
        price=obj.price,
        final_price=catalog.effective_price(obj),
        stock=obj.stock,
        images=[str(i) for i in (obj.images or [])],
        offer=OfferRead(enabled=bool(obj.offer_enabled), discount_percentage=obj.offer_discount_percentage or 0),
    )

@router.get("/{product_type}", response_model=List[ProductRead])
def list_products(product_type: ProductType, limit: int = 50, offset: int = 0, db: Session = Depends(get_db)):
    return [to_read(product_type, p) for p in catalog.list_products(db, product_type, limit=limit, offset=offset)]

@router.get("/{product_type}/{product_id}", response_model=ProductRead)
def get_product(product_type: ProductType, product_id: int, db: Session = Depends(get_db)):
    return to_read(product_type, catalog.get_product_or_404(db, product_type, product_id))

@router.put("/{product_type}/{product_id}/stock", response_model=ProductRead, dependencies=[Depends(require_admin)])
def set_stock(product_type: ProductType, product_id: int, payload: StockUpdate, db: Session = Depends(get_db)):
    return to_read(product_type, catalog.set_stock(db, product_type, product_id, payload.stock))
