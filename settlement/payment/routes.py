from fastapi import APIRouter, Depends, Query, Request, status

from settlement.database import MAX_RECORD_ID
from settlement.payment.schemas import PaymentOut, PaymentRequest
from settlement.payment.workflow import Settlement
from settlement.payment.store import PaymentStore
from settlement.tracing import traced

router = APIRouter()


def get_store(request: Request):
    db = request.app.state.session_factory()
    try:
        yield PaymentStore(db, request.app.state.tracer)
    finally:
        db.close()


def get_tracer(request: Request):
    return request.app.state.tracer


def get_settlement(request: Request, store: PaymentStore = Depends(get_store)) -> Settlement:
    return Settlement(store, request.app.state.order_client, request.app.state.tracer)


@router.post("/payments", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
def create_payment(request: PaymentRequest, settlement: Settlement = Depends(get_settlement)):
    # Client-supplied status is discarded; the gateway decides it
    return settlement.settle(request.order_id, request.amount)


@router.get("/payments", response_model=PaymentOut)
def get_payment_for_order(
    order_id: int = Query(ge=0, le=MAX_RECORD_ID),
    store: PaymentStore = Depends(get_store),
    tracer=Depends(get_tracer),
):
    with traced(tracer, "getPaymentForOrder", order_id=order_id) as span:
        payment = store.latest_for_order(order_id)
        span.set_attribute("payment.status", payment.status)
        return payment


@router.get("/payments/{payment_id}", response_model=PaymentOut)
def get_payment(payment_id: str, store: PaymentStore = Depends(get_store), tracer=Depends(get_tracer)):
    with traced(tracer, "getPayment", payment_id=payment_id) as span:
        payment = store.get(payment_id)
        span.set_attribute("payment.status", payment.status)
        return payment
