"""In-memory order directory for development and testing."""

from protean.exceptions import ObjectNotFoundError

from payflow.order.port import OrderDirectory, OrderSnapshot


class InMemoryOrderDirectory(OrderDirectory):
    def __init__(self) -> None:
        self.orders: dict[str, OrderSnapshot] = {}
        self.fetches: list[str] = []

    def register(self, order: OrderSnapshot) -> OrderSnapshot:
        """Add or replace an order snapshot."""
        self.orders[str(order.order_id)] = order
        return order

    def fetch(self, order_id: str) -> OrderSnapshot:
        self.fetches.append(str(order_id))
        try:
            return self.orders[str(order_id)]
        except KeyError:
            raise ObjectNotFoundError(f"Order with id {order_id} does not exist") from None
