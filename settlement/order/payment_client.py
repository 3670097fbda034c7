from settlement.order.schemas import PaymentView
from settlement.peer import PeerClient


class PaymentServiceClient(PeerClient):
    def get_payment_for_order(self, order_id: str) -> PaymentView:
        response = self.request("GET", "/payments", params={"order_id": order_id})
        return self.decode(response, PaymentView)
