import logging
from typing import Optional

from opentelemetry import trace
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from settlement.database import parse_record_id
from settlement.errors import NotFound, StoreError
from settlement.payment.models import Payment
from settlement.tracing import traced

logger = logging.getLogger(__name__)


class PaymentStore:
    def __init__(self, db: Session, tracer: trace.Tracer):
        self.db = db
        self.tracer = tracer

    def create(self, payment: Payment) -> Payment:
        with traced(
            self.tracer,
            "create payment in DB",
            order_id=payment.order_id,
            amount=payment.amount,
            **{"payment.status": payment.status},
        ) as span:
            try:
                self.db.add(payment)
                self.db.commit()
            except SQLAlchemyError as exc:
                self.db.rollback()
                logger.error(f"Failed to create payment in DB: {exc}")
                raise StoreError(f"Failed to create payment in DB: {exc}") from exc
            span.set_attribute("payment_id", payment.id)
            return payment

    def get(self, payment_id: str) -> Payment:
        with traced(self.tracer, "get payment from DB", payment_id=payment_id):
            key = parse_record_id(payment_id)
            if key is None:
                raise NotFound("Payment not found", payment_id=payment_id)
            payment = self._fetch(lambda: self.db.get(Payment, key))
            if payment is None:
                raise NotFound("Payment not found", payment_id=payment_id)
            return payment

    def latest_for_order(self, order_id: int) -> Payment:
        with traced(self.tracer, "get latest payment for order from DB", order_id=order_id):
            stmt = (
                select(Payment)
                .where(Payment.order_id == order_id)
                .order_by(Payment.id.desc())
                .limit(1)
            )
            payment = self._fetch(lambda: self.db.scalars(stmt).first())
            if payment is None:
                raise NotFound("No payment for order", order_id=order_id)
            return payment

    def _fetch(self, query) -> Optional[Payment]:
        try:
            return query()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to read payment: {exc}") from exc
