import logging

from fastapi import APIRouter, Depends, Request, status

from settlement.order.models import Order
from settlement.order.payment_client import PaymentServiceClient
from settlement.order.schemas import OrderCreate, OrderOut, OrderUpdate, PaymentView
from settlement.order.store import OrderStore, parse_id
from settlement.tracing import traced

logger = logging.getLogger(__name__)

router = APIRouter()


def get_store(request: Request):
    db = request.app.state.session_factory()
    try:
        yield OrderStore(db, request.app.state.tracer)
    finally:
        db.close()


def get_tracer(request: Request):
    return request.app.state.tracer


def get_payment_client(request: Request) -> PaymentServiceClient:
    return request.app.state.payment_client


@router.post("/orders", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
def create_order(request: OrderCreate, store: OrderStore = Depends(get_store), tracer=Depends(get_tracer)):
    with traced(tracer, "Create Order") as span:
        order = store.create(Order(item=request.item, amount=request.amount, paid=request.paid))
        span.set_attributes({"order_id": order.id, "item": order.item, "amount": order.amount})
        logger.info(f"Order {order.id} created")
        return order


@router.get("/orders/{order_id}", response_model=OrderOut)
def get_order(order_id: str, store: OrderStore = Depends(get_store), tracer=Depends(get_tracer)):
    with traced(tracer, "Get Order", order_id=order_id):
        return store.get(parse_id(order_id))


@router.put("/orders/{order_id}", response_model=OrderOut)
def update_order(
    order_id: str,
    request: OrderUpdate,
    store: OrderStore = Depends(get_store),
    tracer=Depends(get_tracer),
):
    with traced(tracer, "Update Order", order_id=order_id):
        order = store.get(parse_id(order_id))
        # Overlay only the fields the client sent; concurrent updates are last-write-wins
        for field, value in request.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(order, field, value)
        return store.save(order)


@router.put("/orders/{order_id}/pay", response_model=OrderOut)
def pay_order(order_id: str, store: OrderStore = Depends(get_store), tracer=Depends(get_tracer)):
    """Settlement callback target. Sets ``paid`` unconditionally, so a repeated call is harmless."""
    with traced(tracer, "Pay Order", order_id=order_id) as span:
        order = store.get(parse_id(order_id))
        span.set_attribute("order.previously_paid", order.paid)
        order.paid = True
        order = store.save(order)
        logger.info(f"Order {order.id} marked paid")
        return order


@router.get("/orders/{order_id}/payment", response_model=PaymentView)
def get_payment(
    order_id: str,
    client: PaymentServiceClient = Depends(get_payment_client),
    tracer=Depends(get_tracer),
):
    with traced(tracer, "Get Payment", **{"payment.order_id": order_id}) as span:
        payment = client.get_payment_for_order(order_id)
        span.set_attribute("payment.status", payment.status)
        return payment
