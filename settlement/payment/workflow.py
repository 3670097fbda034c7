"""
Settlement workflow: a Payment causes its referenced Order to become paid.

Per attempt::

    INITIATED --(persist ok)--> PERSISTED --(callback ok)--> SETTLED
        | persist fails                | callback fails
        v                              v
      FAILED                    PERSISTED_ORPHAN

The Payment row is committed before the Order Service is called and is never
rolled back. A failed callback leaves a successful Payment whose Order is
still unpaid (an orphan payment); the caller gets the error, nothing retries.
"""
import enum
import logging

from opentelemetry import trace

from settlement.errors import SettlementError
from settlement.payment import gateway
from settlement.payment.models import Payment
from settlement.payment.order_client import OrderServiceClient
from settlement.payment.store import PaymentStore
from settlement.tracing import traced

logger = logging.getLogger(__name__)


class SettlementState(str, enum.Enum):
    INITIATED = "initiated"
    PERSISTED = "persisted"
    SETTLED = "settled"
    FAILED = "failed"
    PERSISTED_ORPHAN = "persisted_orphan"


class Settlement:
    def __init__(self, store: PaymentStore, order_client: OrderServiceClient, tracer: trace.Tracer):
        self.store = store
        self.order_client = order_client
        self.tracer = tracer
        self.state = SettlementState.INITIATED

    def _transition(self, state: SettlementState, payment: Payment) -> None:
        self.state = state
        trace.get_current_span().set_attribute("settlement.state", state.value)
        logger.info(
            f"Settlement of order {payment.order_id} -> {state.value}"
            + (f" (payment {payment.id})" if payment.id is not None else "")
        )

    def settle(self, order_id: int, amount: int) -> Payment:
        with traced(self.tracer, "Process Payment", order_id=order_id, amount=amount):
            status = gateway.authorize(self.tracer, order_id, amount)
            payment = Payment(order_id=order_id, amount=amount, status=status.value)
            self._transition(SettlementState.INITIATED, payment)

            try:
                self.store.create(payment)
            except SettlementError:
                self._transition(SettlementState.FAILED, payment)
                raise
            self._transition(SettlementState.PERSISTED, payment)

            try:
                self.order_client.mark_paid(order_id)
            except SettlementError as exc:
                self._transition(SettlementState.PERSISTED_ORPHAN, payment)
                logger.error(
                    f"Orphan payment {payment.id}: order {order_id} was not marked paid: {exc.message}"
                )
                exc.details.update(
                    payment_id=payment.id,
                    order_id=order_id,
                    settlement_state=self.state.value,
                )
                raise
            self._transition(SettlementState.SETTLED, payment)
            return payment
