from settlement.peer import PeerClient


class OrderServiceClient(PeerClient):
    def mark_paid(self, order_id: int) -> None:
        """Settlement callback: ``PUT /orders/{id}/pay`` on the Order Service."""
        self.request("PUT", f"/orders/{order_id}/pay", json={"paid": True})
