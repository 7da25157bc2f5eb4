import json
import logging

from kafka import KafkaProducer

from evshop.core.config import settings

logger = logging.getLogger(__name__)

_producer = None

def get_producer():
    global _producer
    if _producer is None:
        _producer = KafkaProducer(
            bootstrap_servers=[settings.KAFKA_BOOTSTRAP],
            value_serializer=lambda v: json.dumps(v, default=str).encode("utf-8"),
            key_serializer=lambda v: (v.encode("utf-8") if isinstance(v, str) else v),
            linger_ms=5,
            retries=3,
        )
    return _producer

def send(topic: str, key: str, value: dict):
    p = get_producer()
    p.send(topic, key=key, value=value)
    p.flush(5)

def order_event(event_type: str, order, **extra) -> dict:
    value = {
        "type": event_type,
        "order_id": order.id,
        "order_number": order.order_number,
        "status": order.status,
        "payment_status": order.payment_status,
        "amount": str(order.total_amount),
        "items": [
            {"product_id": it.product_id, "product_type": it.product_type, "quantity": it.quantity}
            for it in order.items
        ],
    }
    value.update(extra)
    return value

def publish(event: dict) -> None:
    """Emit an order event after the database commit.

    Delivery is best-effort: a broker failure is logged, never raised, so it
    cannot undo an order that is already stored.
    """
    if not settings.KAFKA_BOOTSTRAP:
        return
    try:
        send(settings.TOPIC_ORDER_EVENTS, key=event["order_number"], value=event)
    except Exception:
        logger.exception("failed to publish %s for order %s", event["type"], event["order_number"])
