"""Error taxonomy for the Ordering domain.

Every error carries a human readable ``message`` and an optional ``errors``
mapping (field -> list of messages). The HTTP layer renders both as
``{"message": ..., "errors": ...}`` with the class's ``status_code``.
"""


class OrderingError(Exception):
    status_code = 400

    def __init__(self, message: str, errors: dict | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors

    def to_dict(self) -> dict:
        payload = {"message": self.message}
        if self.errors:
            payload["errors"] = self.errors
        return payload


# ---------------------------------------------------------------------------
# 400: malformed input
# ---------------------------------------------------------------------------
class ValidationError(OrderingError):
    status_code = 400


class UnknownOptionError(ValidationError):
    def __init__(self, option_ids):
        ids = sorted(option_ids)
        super().__init__(
            "Selection references unknown options",
            {"selections": [f"Unknown option id: {option_id}" for option_id in ids]},
        )
        self.option_ids = ids


# ---------------------------------------------------------------------------
# 404: missing resources
# ---------------------------------------------------------------------------
class NotFoundError(OrderingError):
    status_code = 404


class CartNotFoundError(NotFoundError):
    def __init__(self, customer_id):
        super().__init__("Cart not found", {"customer_id": [str(customer_id)]})


class CartLineNotFoundError(NotFoundError):
    def __init__(self, line_id):
        super().__init__("Cart item not found", {"line_id": [str(line_id)]})


class AddressNotFoundError(NotFoundError):
    def __init__(self, address_id):
        super().__init__("Delivery address not found", {"delivery_address_id": [str(address_id)]})


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id):
        super().__init__("Order not found", {"order_id": [str(order_id)]})


class MenuItemNotFoundError(NotFoundError):
    def __init__(self, menu_item_id):
        super().__init__("Menu item not found", {"menu_item_id": [str(menu_item_id)]})


class SavedCartNotFoundError(NotFoundError):
    def __init__(self, saved_cart_id):
        super().__init__("Saved cart not found", {"saved_cart_id": [str(saved_cart_id)]})


# ---------------------------------------------------------------------------
# 403: resource does not belong to the caller
# ---------------------------------------------------------------------------
class OwnershipError(OrderingError):
    status_code = 403


class AddressOwnershipError(OwnershipError):
    def __init__(self):
        super().__init__("Delivery address does not belong to this customer")


# ---------------------------------------------------------------------------
# 400: illegal state for the requested operation
# ---------------------------------------------------------------------------
class StateConflictError(OrderingError):
    status_code = 400


class EmptyCartError(StateConflictError):
    def __init__(self):
        super().__init__("Cart is empty")


class MixedRestaurantError(StateConflictError):
    def __init__(self, restaurant_ids):
        super().__init__(
            "All items must be from the same restaurant",
            {"restaurant_ids": sorted(str(r) for r in restaurant_ids)},
        )


class InvalidTransitionError(StateConflictError):
    pass


class InvalidReorderStateError(StateConflictError):
    def __init__(self, status):
        super().__init__(
            "Can only reorder from delivered or cancelled orders",
            {"status": [f"Order is {status}"]},
        )


# ---------------------------------------------------------------------------
# 409: the aggregate changed underneath the request
# ---------------------------------------------------------------------------
class ConcurrencyConflictError(OrderingError):
    status_code = 409


# ---------------------------------------------------------------------------
# Collaborator and infrastructure failures
# ---------------------------------------------------------------------------
class PaymentCollaboratorError(OrderingError):
    status_code = 502


class PersistenceError(OrderingError):
    status_code = 500
