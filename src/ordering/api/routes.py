"""FastAPI routes for the Ordering domain: carts, checkout and orders."""

from decimal import Decimal

from fastapi import APIRouter
from protean.utils.globals import current_domain

from ordering.address.address import AddDeliveryAddress, addresses_for
from ordering.api.schemas import (
    AddAddressRequest,
    AddressIdResponse,
    AddressResponse,
    AddToCartRequest,
    ApplyPromoRequest,
    CancellationReasonsResponse,
    CancelOrderRequest,
    CancelOrderResponse,
    CartLineResponse,
    CartResponse,
    CheckoutSummaryResponse,
    CreateOrderRequest,
    CustomerRequest,
    DeclineOrderRequest,
    DeclineOrderResponse,
    OrderPageResponse,
    OrderResponse,
    PricedLineResponse,
    PromoApplicationResponse,
    PromoCodeResponse,
    RecordPaymentRequest,
    RefundRequest,
    RefundResponse,
    ReorderPreviewResponse,
    ReorderRequest,
    ReorderResponse,
    RestaurantRequest,
    RestoreResponse,
    SaveCartRequest,
    SavedCartResponse,
    StatusResponse,
    UpdateCartLineRequest,
    UpdatePaymentStatusRequest,
    UpdateStatusRequest,
)
from ordering.cart.aggregation import CartAggregator
from ordering.cart.cart import find_cart
from ordering.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartLineQuantity
from ordering.cart.saved import RestoreSavedCart, SaveCart
from ordering.money import decimal_str, money_str, round_money
from ordering.order.acceptance import accept_order, decline_order
from ordering.order.cancellation import CANCELLATION_REASONS, cancel_order
from ordering.order.checkout import checkout_summary, place_order
from ordering.order.fulfillment import update_order_status
from ordering.order.history import (
    CUSTOMER_PAGE_SIZE,
    RESTAURANT_PAGE_SIZE,
    accepted_queue,
    active_orders,
    customer_orders,
    past_orders,
    restaurant_orders,
)
from ordering.order.lifecycle import OrderStatus
from ordering.order.order import load_order
from ordering.order.payment import record_payment, update_payment_status
from ordering.order.refund import refund_order
from ordering.order.reorder import reorder, reorder_preview
from ordering.promo.engine import PromoEngine
from ordering.selection import SelectionSet

# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(customer_id: str) -> CartResponse:
    cart = find_cart(customer_id)
    if cart is None or not cart.lines:
        return CartResponse(customer_id=customer_id, cart_id=str(cart.id) if cart else None)

    lines = CartAggregator().price_lines(cart)
    return CartResponse(
        customer_id=customer_id,
        cart_id=str(cart.id),
        lines=[PricedLineResponse.from_line(line) for line in lines],
        subtotal=money_str(round_money(sum((line.total_price for line in lines), Decimal("0")))),
        item_count=cart.item_count,
    )


@cart_router.post("/items", status_code=201, response_model=CartLineResponse)
async def add_to_cart(body: AddToCartRequest) -> CartLineResponse:
    selection = SelectionSet.build(
        [v.model_dump() for v in body.selections.variations],
        [a.model_dump() for a in body.selections.add_ons],
    )
    command = AddToCart(
        customer_id=body.customer_id,
        menu_item_id=body.menu_item_id,
        quantity=body.quantity,
        selections=selection.to_json(),
        special_notes=body.special_notes,
    )
    result = current_domain.process(command, asynchronous=False)
    return CartLineResponse(cart_id=result.cart_id, line_id=result.line_id, quantity=result.quantity)


@cart_router.patch("/items/{line_id}", response_model=CartLineResponse)
async def update_cart_line(line_id: str, body: UpdateCartLineRequest) -> CartLineResponse:
    command = UpdateCartLineQuantity(
        customer_id=body.customer_id,
        line_id=line_id,
        quantity=body.quantity,
    )
    result = current_domain.process(command, asynchronous=False)
    return CartLineResponse(cart_id=result.cart_id, line_id=result.line_id, quantity=result.quantity)


@cart_router.delete("/items/{line_id}", response_model=StatusResponse)
async def remove_cart_line(line_id: str, customer_id: str) -> StatusResponse:
    current_domain.process(RemoveFromCart(customer_id=customer_id, line_id=line_id), asynchronous=False)
    return StatusResponse()


@cart_router.delete("", response_model=StatusResponse)
async def clear_cart(customer_id: str) -> StatusResponse:
    current_domain.process(ClearCart(customer_id=customer_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Saved Cart Router
# ---------------------------------------------------------------------------
saved_cart_router = APIRouter(prefix="/saved-carts", tags=["saved-carts"])


@saved_cart_router.post("", status_code=201, response_model=SavedCartResponse)
async def save_cart(body: SaveCartRequest) -> SavedCartResponse:
    saved_cart_id = current_domain.process(
        SaveCart(customer_id=body.customer_id, name=body.name),
        asynchronous=False,
    )
    return SavedCartResponse(saved_cart_id=saved_cart_id)


@saved_cart_router.post("/{saved_cart_id}/restore", response_model=RestoreResponse)
async def restore_saved_cart(saved_cart_id: str, body: CustomerRequest) -> RestoreResponse:
    result = current_domain.process(
        RestoreSavedCart(saved_cart_id=saved_cart_id, customer_id=body.customer_id),
        asynchronous=False,
    )
    return RestoreResponse(cart_id=result.cart_id, items_added=result.items_added)


# ---------------------------------------------------------------------------
# Address Router
# ---------------------------------------------------------------------------
address_router = APIRouter(prefix="/addresses", tags=["addresses"])


@address_router.post("", status_code=201, response_model=AddressIdResponse)
async def add_address(body: AddAddressRequest) -> AddressIdResponse:
    address_id = current_domain.process(AddDeliveryAddress(**body.model_dump()), asynchronous=False)
    return AddressIdResponse(address_id=address_id)


@address_router.get("", response_model=list[AddressResponse])
async def list_addresses(customer_id: str) -> list[AddressResponse]:
    return [AddressResponse.from_address(address) for address in addresses_for(customer_id)]


# ---------------------------------------------------------------------------
# Promo Code Router
# ---------------------------------------------------------------------------
promo_router = APIRouter(prefix="/promo-codes", tags=["promo-codes"])


@promo_router.post("/apply", response_model=PromoApplicationResponse)
async def apply_promo_code(body: ApplyPromoRequest) -> PromoApplicationResponse:
    application = PromoEngine().apply(body.code, restaurant_id=body.restaurant_id)
    return PromoApplicationResponse(
        valid=application.valid,
        promo_code_id=application.promo_code_id,
        code=application.code,
        discount_percentage=decimal_str(application.discount_percentage) if application.valid else None,
        reason=application.reason,
    )


@promo_router.get("/available", response_model=list[PromoCodeResponse])
async def available_promo_codes(restaurant_id: str | None = None) -> list[PromoCodeResponse]:
    return [
        PromoCodeResponse(
            id=str(promo.id),
            code=promo.code,
            description=promo.description,
            discount_percentage=decimal_str(promo.discount_percentage),
            start_date=promo.start_date,
            end_date=promo.end_date,
            restaurant_id=str(promo.restaurant_id) if promo.restaurant_id else None,
        )
        for promo in PromoEngine().available(restaurant_id=restaurant_id)
    ]


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("/create-order", status_code=201, response_model=OrderResponse)
async def create_order(body: CreateOrderRequest) -> OrderResponse:
    order = place_order(
        customer_id=body.customer_id,
        delivery_address_id=body.delivery_address_id,
        payment_method=body.payment_method,
        promo_code_id=body.promo_code_id,
        tax=body.tax,
        delivery_fee=body.delivery_fee,
        special_instructions=body.special_instructions,
        idempotency_key=body.idempotency_key,
    )
    return OrderResponse.from_order(order)


@checkout_router.get("/summary", response_model=CheckoutSummaryResponse)
async def get_checkout_summary(customer_id: str) -> CheckoutSummaryResponse:
    return CheckoutSummaryResponse.from_summary(checkout_summary(customer_id))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("/cancellation-reasons", response_model=CancellationReasonsResponse)
async def cancellation_reasons() -> CancellationReasonsResponse:
    return CancellationReasonsResponse(reasons=CANCELLATION_REASONS)


@order_router.post("/cancel", response_model=CancelOrderResponse)
async def cancel(body: CancelOrderRequest) -> CancelOrderResponse:
    result = cancel_order(body.order_id, body.customer_id, body.reason)
    return CancelOrderResponse(
        id=result.order_id,
        order_number=result.order_number,
        status=result.status,
        reason=result.reason,
        refund_initiated=result.refund_initiated,
        message=result.message,
    )


@order_router.post("/reorder", response_model=ReorderResponse)
async def reorder_items(body: ReorderRequest) -> ReorderResponse:
    result = reorder(body.order_id, body.customer_id)
    return ReorderResponse(cart_id=result.cart_id, items_added=result.items_added, message=result.message)


@order_router.get("/list", response_model=OrderPageResponse)
async def list_orders(
    customer_id: str, status: OrderStatus | None = None, limit: int = CUSTOMER_PAGE_SIZE, offset: int = 0
) -> OrderPageResponse:
    return OrderPageResponse.from_page(customer_orders(customer_id, status=status, limit=limit, offset=offset))


@order_router.get("/active", response_model=OrderPageResponse)
async def list_active_orders(customer_id: str, limit: int = CUSTOMER_PAGE_SIZE, offset: int = 0) -> OrderPageResponse:
    return OrderPageResponse.from_page(active_orders(customer_id, limit=limit, offset=offset))


@order_router.get("/past", response_model=OrderPageResponse)
async def list_past_orders(customer_id: str, limit: int = CUSTOMER_PAGE_SIZE, offset: int = 0) -> OrderPageResponse:
    return OrderPageResponse.from_page(past_orders(customer_id, limit=limit, offset=offset))


@order_router.get("/restaurant/{restaurant_id}", response_model=OrderPageResponse)
async def list_restaurant_orders(
    restaurant_id: str, status: OrderStatus | None = None, limit: int = RESTAURANT_PAGE_SIZE, offset: int = 0
) -> OrderPageResponse:
    return OrderPageResponse.from_page(restaurant_orders(restaurant_id, status=status, limit=limit, offset=offset))


@order_router.get("/restaurant/{restaurant_id}/accepted", response_model=OrderPageResponse)
async def list_accepted_queue(
    restaurant_id: str, limit: int = RESTAURANT_PAGE_SIZE, offset: int = 0
) -> OrderPageResponse:
    return OrderPageResponse.from_page(accepted_queue(restaurant_id, limit=limit, offset=offset))


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    return OrderResponse.from_order(load_order(order_id))


@order_router.get("/{order_id}/reorder-preview", response_model=ReorderPreviewResponse)
async def get_reorder_preview(order_id: str, customer_id: str) -> ReorderPreviewResponse:
    return ReorderPreviewResponse.from_preview(reorder_preview(order_id, customer_id))


@order_router.post("/{order_id}/accept", response_model=OrderResponse)
async def accept(order_id: str, body: RestaurantRequest) -> OrderResponse:
    return OrderResponse.from_order(accept_order(order_id, body.restaurant_id))


@order_router.post("/{order_id}/decline", response_model=DeclineOrderResponse)
async def decline(order_id: str, body: DeclineOrderRequest) -> DeclineOrderResponse:
    outcome = decline_order(order_id, body.restaurant_id, body.reason)
    return DeclineOrderResponse(
        order=OrderResponse.from_order(outcome.order),
        refund_initiated=outcome.refund_initiated,
    )


@order_router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_status(order_id: str, body: UpdateStatusRequest) -> OrderResponse:
    order = update_order_status(
        order_id,
        body.restaurant_id,
        body.status,
        estimated_delivery_time=body.estimated_delivery_time,
    )
    return OrderResponse.from_order(order)


@order_router.patch("/{order_id}/payment-status", response_model=OrderResponse)
async def correct_payment_status(order_id: str, body: UpdatePaymentStatusRequest) -> OrderResponse:
    order = update_payment_status(order_id, body.restaurant_id, body.payment_status, reason=body.reason)
    return OrderResponse.from_order(order)


@order_router.post("/{order_id}/payment", response_model=OrderResponse)
async def capture_payment(order_id: str, body: RecordPaymentRequest) -> OrderResponse:
    return OrderResponse.from_order(record_payment(order_id, body.payment_reference))


@order_router.post("/{order_id}/refund", response_model=RefundResponse)
async def refund(order_id: str, body: RefundRequest) -> RefundResponse:
    outcome = refund_order(order_id, amount=body.amount, actor_id=body.actor_id, actor_role=body.actor_role)
    return RefundResponse(
        order_id=outcome.order_id,
        amount=money_str(outcome.amount),
        refund_reference=outcome.refund_reference,
        cash_on_delivery=outcome.cash_on_delivery,
    )
