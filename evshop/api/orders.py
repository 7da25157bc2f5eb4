from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from evshop.api.deps import get_db
from evshop.core.auth import get_current_identity, get_optional_identity, require_admin
from evshop.schemas import OrderCreate, OrderRead, OrderStatusUpdate, OrderUpdate, PaymentStatusUpdate
from evshop.services import orders

router = APIRouter()

@router.post("", response_model=OrderRead, status_code=201)
def create_order(payload: OrderCreate, identity: Optional[dict] = Depends(get_optional_identity), db: Session = Depends(get_db)):
    user_id = identity.get("sub") if identity else None
    return orders.create_order(db, payload, user_id=user_id)

@router.get("", response_model=List[OrderRead], dependencies=[Depends(require_admin)])
def list_orders(status: Optional[str] = None, limit: int = 50, offset: int = 0, db: Session = Depends(get_db)):
    return orders.list_orders(db, status=status, limit=limit, offset=offset)

@router.get("/user/my-orders", response_model=List[OrderRead])
def my_orders(identity: dict = Depends(get_current_identity), db: Session = Depends(get_db)):
    return orders.list_user_orders(db, identity.get("sub"))

@router.get("/track/{order_number}", response_model=OrderRead)
def track_order(order_number: str, db: Session = Depends(get_db)):
    return orders.get_order_by_number(db, order_number)

@router.get("/{order_id}", response_model=OrderRead)
def get_order(order_id: int, db: Session = Depends(get_db)):
    return orders.get_order(db, order_id)

@router.put("/{order_id}/status", response_model=OrderRead, dependencies=[Depends(require_admin)])
def update_order_status(order_id: int, payload: OrderStatusUpdate, db: Session = Depends(get_db)):
    return orders.update_status(db, order_id, payload.status)

@router.put("/{order_id}/payment-status", response_model=OrderRead, dependencies=[Depends(require_admin)])
def update_payment_status(order_id: int, payload: PaymentStatusUpdate, db: Session = Depends(get_db)):
    return orders.update_payment_status(db, order_id, payload.payment_status)

@router.put("/{order_id}", response_model=OrderRead, dependencies=[Depends(require_admin)])
def update_order(order_id: int, payload: OrderUpdate, db: Session = Depends(get_db)):
    return orders.update_order(db, order_id, payload)

@router.delete("/{order_id}", dependencies=[Depends(require_admin)])
def delete_order(order_id: int, db: Session = Depends(get_db)):
    orders.delete_order(db, order_id)
    return {"status": "deleted"}
