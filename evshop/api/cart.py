from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from evshop.api.deps import get_db
from evshop.schemas import CartItemAdd, CartItemUpdate, CartRead
from evshop.services import cart as carts

router = APIRouter()

@router.get("/{session_id}", response_model=CartRead)
def get_cart(session_id: str, db: Session = Depends(get_db)):
    return carts.get_or_create_cart(db, session_id)

@router.post("/{session_id}/add", response_model=CartRead)
def add_to_cart(session_id: str, payload: CartItemAdd, db: Session = Depends(get_db)):
    return carts.add_item(db, session_id, payload.product_id, payload.product_type, payload.quantity)

@router.put("/{session_id}/update", response_model=CartRead)
def update_cart_item(session_id: str, payload: CartItemUpdate, db: Session = Depends(get_db)):
    return carts.update_item(db, session_id, payload.product_id, payload.product_type, payload.quantity)

@router.delete("/{session_id}/remove/{product_id}/{product_type}", response_model=CartRead)
def remove_from_cart(session_id: str, product_id: int, product_type: str, db: Session = Depends(get_db)):
    return carts.remove_item(db, session_id, product_id, product_type)

@router.delete("/{session_id}/clear", response_model=CartRead)
def clear_cart(session_id: str, db: Session = Depends(get_db)):
    return carts.clear_cart(db, session_id)
