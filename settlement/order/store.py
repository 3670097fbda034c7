import logging

from opentelemetry import trace
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from settlement.database import parse_record_id
from settlement.errors import NotFound, StoreError
from settlement.order.models import Order
from settlement.tracing import traced

logger = logging.getLogger(__name__)


def parse_id(order_id: str) -> int:
    key = parse_record_id(order_id)
    if key is None:
        raise NotFound("Order not found", order_id=order_id)
    return key


class OrderStore:
    """Order records on one SQLAlchemy session; every access gets its own span."""

    def __init__(self, db: Session, tracer: trace.Tracer):
        self.db = db
        self.tracer = tracer

    def create(self, order: Order) -> Order:
        with traced(self.tracer, "trace: create order in db", item=order.item, amount=order.amount) as span:
            self._commit(order, "Failed to create order in database")
            span.set_attribute("order_id", order.id)
            return order

    def get(self, order_id: int) -> Order:
        with traced(self.tracer, "trace: get order from db", order_id=order_id):
            try:
                order = self.db.get(Order, order_id)
            except SQLAlchemyError as exc:
                raise StoreError(f"Failed to read order: {exc}") from exc
            if order is None:
                raise NotFound("Order not found", order_id=order_id)
            return order

    def save(self, order: Order) -> Order:
        with traced(self.tracer, "trace: save order in db", order_id=order.id, paid=order.paid):
            self._commit(order, "Failed to save order in database")
            return order

    def _commit(self, order: Order, message: str) -> None:
        try:
            self.db.add(order)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"{message}: {exc}")
            raise StoreError(f"{message}: {exc}") from exc
