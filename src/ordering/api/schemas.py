"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer): separate from
internal Protean commands. Money leaves the API as 2-decimal strings.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ordering.money import money_str
from ordering.order.capabilities import Actor
from ordering.order.lifecycle import OrderStatus, PaymentMethod, PaymentStatus


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class VariationSelectionSchema(BaseModel):
    variation_id: str
    selected_option_id: str


class AddOnSelectionSchema(BaseModel):
    add_on_id: str
    selected_option_ids: list[str] = Field(default_factory=list)


class SelectionSchema(BaseModel):
    variations: list[VariationSelectionSchema] = Field(default_factory=list)
    add_ons: list[AddOnSelectionSchema] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    message: str
    errors: dict | None = None


class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    customer_id: str
    menu_item_id: str
    quantity: int = Field(ge=1, default=1)
    selections: SelectionSchema = Field(default_factory=SelectionSchema)
    special_notes: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cust-001",
                    "menu_item_id": "item-001",
                    "quantity": 2,
                    "selections": {
                        "variations": [{"variation_id": "size", "selected_option_id": "large"}],
                        "add_ons": [{"add_on_id": "toppings", "selected_option_ids": ["cheese"]}],
                    },
                    "special_notes": "No onions",
                }
            ]
        }
    }


class UpdateCartLineRequest(BaseModel):
    customer_id: str
    quantity: int = Field(ge=1)


class CustomerRequest(BaseModel):
    customer_id: str


class CartLineResponse(BaseModel):
    cart_id: str
    line_id: str
    quantity: int


class PricedLineResponse(BaseModel):
    line_id: str
    menu_item_id: str
    restaurant_id: str
    item_name: str
    unit_price: str
    quantity: int
    total_price: str
    special_notes: str | None = None
    selections: SelectionSchema

    @classmethod
    def from_line(cls, line) -> "PricedLineResponse":
        return cls(
            line_id=line.line_id,
            menu_item_id=line.menu_item_id,
            restaurant_id=line.restaurant_id,
            item_name=line.item_name,
            unit_price=money_str(line.unit_price),
            quantity=line.quantity,
            total_price=money_str(line.total_price),
            special_notes=line.special_notes,
            selections=SelectionSchema(**line.selection.to_dict()),
        )


class CartResponse(BaseModel):
    customer_id: str
    cart_id: str | None = None
    lines: list[PricedLineResponse] = Field(default_factory=list)
    subtotal: str = "0.00"
    item_count: int = 0


class SaveCartRequest(BaseModel):
    customer_id: str
    name: str = Field(min_length=1, max_length=100)


class SavedCartResponse(BaseModel):
    saved_cart_id: str


class RestoreResponse(BaseModel):
    cart_id: str
    items_added: int


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------
class AddAddressRequest(BaseModel):
    customer_id: str
    label: str | None = None
    address_line: str
    city: str
    postal_code: str | None = None
    is_default: bool = False


class AddressResponse(BaseModel):
    id: str
    label: str | None = None
    address_line: str
    city: str
    postal_code: str | None = None
    is_default: bool

    @classmethod
    def from_address(cls, address) -> "AddressResponse":
        return cls(
            id=str(address.id),
            label=address.label,
            address_line=address.address_line,
            city=address.city,
            postal_code=address.postal_code,
            is_default=bool(address.is_default),
        )


class AddressIdResponse(BaseModel):
    address_id: str


# ---------------------------------------------------------------------------
# Promo codes
# ---------------------------------------------------------------------------
class ApplyPromoRequest(BaseModel):
    code: str = Field(min_length=1)
    restaurant_id: str | None = None


class PromoApplicationResponse(BaseModel):
    valid: bool
    promo_code_id: str | None = None
    code: str | None = None
    discount_percentage: str | None = None
    reason: str | None = None


class PromoCodeResponse(BaseModel):
    id: str
    code: str
    description: str | None = None
    discount_percentage: str
    start_date: datetime
    end_date: datetime
    restaurant_id: str | None = None


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class CreateOrderRequest(BaseModel):
    customer_id: str
    delivery_address_id: str
    payment_method: PaymentMethod
    promo_code_id: str | None = None
    tax: float = Field(ge=0, default=0.0)
    delivery_fee: float = Field(ge=0, default=0.0)
    special_instructions: str | None = None
    idempotency_key: str | None = Field(default=None, max_length=255)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cust-001",
                    "delivery_address_id": "addr-001",
                    "payment_method": "CARD",
                    "promo_code_id": None,
                    "tax": 1.5,
                    "delivery_fee": 2.5,
                    "special_instructions": "Ring the bell",
                    "idempotency_key": "checkout-7f3a",
                }
            ]
        }
    }


class RestaurantGroupResponse(BaseModel):
    restaurant_id: str
    subtotal: str
    lines: list[PricedLineResponse]


class CheckoutSummaryResponse(BaseModel):
    customer_id: str
    restaurants: list[RestaurantGroupResponse]
    addresses: list[AddressResponse]
    subtotal: str
    cart_item_count: int
    can_checkout: bool

    @classmethod
    def from_summary(cls, summary) -> "CheckoutSummaryResponse":
        return cls(
            customer_id=summary.customer_id,
            restaurants=[
                RestaurantGroupResponse(
                    restaurant_id=group.restaurant_id,
                    subtotal=money_str(group.subtotal),
                    lines=[PricedLineResponse.from_line(line) for line in group.lines],
                )
                for group in summary.groups
            ],
            addresses=[AddressResponse.from_address(a) for a in summary.addresses],
            subtotal=money_str(summary.subtotal),
            cart_item_count=summary.item_count,
            can_checkout=summary.can_checkout,
        )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderLineResponse(BaseModel):
    id: str
    menu_item_id: str
    item_name: str
    unit_price: str
    quantity: int
    total_price: str
    special_notes: str | None = None
    selections: SelectionSchema


class OrderResponse(BaseModel):
    id: str
    order_number: str
    customer_id: str
    restaurant_id: str
    delivery_address_id: str
    status: OrderStatus
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    subtotal: str
    tax: str
    delivery_fee: str
    discount: str
    total: str
    promo_code_id: str | None = None
    special_instructions: str | None = None
    cancellation_reason: str | None = None
    rejection_reason: str | None = None
    estimated_delivery_time: datetime | None = None
    actual_delivery_time: datetime | None = None
    paid_at: datetime | None = None
    placed_at: datetime | None = None
    lines: list[OrderLineResponse]

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        pricing = order.pricing
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            customer_id=str(order.customer_id),
            restaurant_id=str(order.restaurant_id),
            delivery_address_id=str(order.delivery_address_id),
            status=order.status,
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            subtotal=money_str(pricing.subtotal),
            tax=money_str(pricing.tax),
            delivery_fee=money_str(pricing.delivery_fee),
            discount=money_str(pricing.discount),
            total=money_str(pricing.total),
            promo_code_id=str(order.promo_code_id) if order.promo_code_id else None,
            special_instructions=order.special_instructions,
            cancellation_reason=order.cancellation_reason,
            rejection_reason=order.rejection_reason,
            estimated_delivery_time=order.estimated_delivery_time,
            actual_delivery_time=order.actual_delivery_time,
            paid_at=order.paid_at,
            placed_at=order.placed_at,
            lines=[
                OrderLineResponse(
                    id=str(line.id),
                    menu_item_id=str(line.menu_item_id),
                    item_name=line.item_name,
                    unit_price=money_str(line.unit_price),
                    quantity=line.quantity,
                    total_price=money_str(line.total_price),
                    special_notes=line.special_notes,
                    selections=SelectionSchema(**line.selection.to_dict()),
                )
                for line in order.lines
            ],
        )


class CancelOrderRequest(BaseModel):
    order_id: str
    customer_id: str
    reason: str = Field(min_length=3, max_length=500)


class CancelOrderResponse(BaseModel):
    id: str
    order_number: str
    status: OrderStatus
    reason: str
    refund_initiated: bool
    message: str


class ReorderRequest(BaseModel):
    order_id: str
    customer_id: str


class ReorderResponse(BaseModel):
    cart_id: str
    items_added: int
    message: str


class CancellationReasonsResponse(BaseModel):
    reasons: list[str]


class RestaurantRequest(BaseModel):
    restaurant_id: str


class DeclineOrderRequest(BaseModel):
    restaurant_id: str
    reason: str = Field(min_length=3, max_length=500)


class DeclineOrderResponse(BaseModel):
    order: OrderResponse
    refund_initiated: bool


class UpdateStatusRequest(BaseModel):
    restaurant_id: str
    status: OrderStatus
    estimated_delivery_time: datetime | None = None


class UpdatePaymentStatusRequest(BaseModel):
    restaurant_id: str
    payment_status: PaymentStatus
    reason: str | None = Field(default=None, max_length=500)


class RecordPaymentRequest(BaseModel):
    payment_reference: str = Field(min_length=1, max_length=255)


class RefundRequest(BaseModel):
    amount: float | None = Field(default=None, gt=0)
    actor_id: str | None = None
    actor_role: Actor


class RefundResponse(BaseModel):
    order_id: str
    amount: str
    refund_reference: str | None = None
    cash_on_delivery: bool


# ---------------------------------------------------------------------------
# Order history
# ---------------------------------------------------------------------------
class OrderSummaryResponse(BaseModel):
    id: str
    order_number: str
    customer_id: str
    restaurant_id: str
    status: OrderStatus
    payment_status: PaymentStatus
    item_count: int
    total: str
    currency: str
    placed_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_summary(cls, summary) -> "OrderSummaryResponse":
        return cls(
            id=str(summary.order_id),
            order_number=summary.order_number,
            customer_id=str(summary.customer_id),
            restaurant_id=str(summary.restaurant_id),
            status=summary.status,
            payment_status=summary.payment_status,
            item_count=summary.item_count or 0,
            total=money_str(summary.total),
            currency=summary.currency,
            placed_at=summary.placed_at,
            updated_at=summary.updated_at,
        )


class OrderPageResponse(BaseModel):
    data: list[OrderSummaryResponse]
    total: int
    limit: int
    offset: int

    @classmethod
    def from_page(cls, page) -> "OrderPageResponse":
        return cls(
            data=[OrderSummaryResponse.from_summary(summary) for summary in page.orders],
            total=page.total,
            limit=page.limit,
            offset=page.offset,
        )


class ReorderPreviewLineResponse(BaseModel):
    menu_item_id: str
    item_name: str
    unit_price: str
    quantity: int
    special_notes: str | None = None
    selections: SelectionSchema


class ReorderPreviewResponse(BaseModel):
    id: str
    order_number: str
    restaurant_id: str
    status: OrderStatus
    total: str
    can_reorder: bool
    lines: list[ReorderPreviewLineResponse]

    @classmethod
    def from_preview(cls, preview) -> "ReorderPreviewResponse":
        order = preview.order
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            restaurant_id=str(order.restaurant_id),
            status=order.status,
            total=money_str(order.pricing.total),
            can_reorder=preview.can_reorder,
            lines=[
                ReorderPreviewLineResponse(
                    menu_item_id=str(line.menu_item_id),
                    item_name=line.item_name,
                    unit_price=money_str(line.unit_price),
                    quantity=line.quantity,
                    special_notes=line.special_notes,
                    selections=SelectionSchema(**line.selection.to_dict()),
                )
                for line in order.lines
            ],
        )
