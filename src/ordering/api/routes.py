"""FastAPI routes for the Ordering domain: carts, orders, prices and admin tools.

The caller is identified by the ``X-User-Id``, ``X-User-Email`` and
``X-Role-Level`` headers set by the authenticating gateway in front of
this service.
"""

import json
from dataclasses import asdict

from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.encoders import jsonable_encoder
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    AddCartItemRequest,
    AffectedListsResponse,
    BackfillRequest,
    CartLineResponse,
    CartResponse,
    ChangeStatusRequest,
    CheckoutResponse,
    ConfirmPaymentRequest,
    CorrectionResponse,
    CorrectLinesRequest,
    OrderItemResponse,
    OrderResponse,
    OrderSummaryResponse,
    PlacedOrderResponse,
    PlaceOrderRequest,
    PriceChangeSchema,
    PriceHistoryEntry,
    RejectPaymentRequest,
    RemittanceFileResponse,
    RemittanceUploadedResponse,
    ResolvedPriceResponse,
    ReviewTTRequest,
    SetPricesRequest,
    SetPricesResponse,
    ShippingEstimateResponse,
    ShipToSchema,
    StatusResponse,
    SupplierProfileRequest,
    TTPaymentResponse,
    UpdateCartQuantityRequest,
    UploadRemittanceRequest,
)
from ordering.cart.store import CartStore
from ordering.catalog import get_catalog
from ordering.invoice.service import invoice_for
from ordering.invoice.supplier import UpdateSupplierProfile
from ordering.order.cancellation import CancelOrder
from ordering.order.correction import CorrectOrderLines
from ordering.order.fulfillment import ChangeOrderStatus
from ordering.order.order import Order
from ordering.order.payment import ConfirmPayment, RejectPayment, ReviewTTPayment
from ordering.order.placement import estimate_cfr_shipping, place_order
from ordering.payment.checkout import request_tt, start_card_checkout
from ordering.payment.remittance import delete_remittance, upload_remittance
from ordering.pricing.maintenance import BackfillProductPrices, RemoveProductPrices, SetCustomerPrices
from ordering.pricing.resolver import resolve_price
from ordering.projections.order_summary import list_order_summaries
from ordering.projections.price_change_log import price_history
from ordering.shared.principal import Principal


def current_principal(
    x_user_id: str = Header(default=""),
    x_user_email: str = Header(default=""),
    x_role_level: int = Header(default=0),
) -> Principal:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return Principal(id=x_user_id, email=x_user_email or None, role_level=x_role_level)


def _cart_response(store: CartStore) -> CartResponse:
    cart = store.cart
    totals = cart.totals()
    return CartResponse(
        customer_id=store.customer_id,
        lines=[
            CartLineResponse(
                product_id=str(line.product_id),
                name=line.name,
                unit_price=line.unit_price,
                discount_unit_price=line.discount_unit_price,
                effective_price=line.effective_price,
                quantity=line.quantity,
                line_total=line.line_total,
                image_ref=line.image_ref,
                category_name=line.category_name,
            )
            for line in cart.lines
        ],
        total_items=totals.total_items,
        total_amount=totals.total_amount,
        revision=cart.revision or 0,
        attention=store.attention,
        persisted=store.last_persist_error is None,
    )


def _order_response(order: Order) -> OrderResponse:
    ship_to = order.ship_to
    return OrderResponse(
        id=str(order.id),
        order_number=order.order_number,
        customer_id=str(order.customer_id),
        customer_email=order.customer_email,
        company_name=order.company_name,
        items=[OrderItemResponse(**item.to_dict()) for item in order.items],
        ship_to=ShipToSchema(
            company_name=ship_to.company_name,
            contact_name=ship_to.contact_name,
            tel_no=ship_to.tel_no,
            mob_no=ship_to.mob_no,
            address=ship_to.address,
            email=ship_to.email,
        )
        if ship_to
        else None,
        shipping_terms=order.shipping_terms,
        subtotal=order.pricing.subtotal,
        shipping_cost=order.pricing.shipping_cost,
        total_amount=order.pricing.total_amount,
        status=order.status,
        payment_status=order.payment_status,
        payment_method=order.payment_method,
        payment_id=order.payment_id,
        tt_payment=TTPaymentResponse(
            status=order.tt_status,
            admin_note=order.tt_admin_note,
            remittance_files=[
                RemittanceFileResponse(id=str(f.id), name=f.name, url=f.url, uploaded_at=f.uploaded_at)
                for f in order.remittance_files
            ],
        )
        if order.payment_method == "tt"
        else None,
        notes=order.notes,
        revision=order.revision or 0,
        created_at=order.created_at,
        created_by=order.created_by,
        updated_at=order.updated_at,
        updated_by=order.updated_by,
    )


def _summary_response(summary) -> OrderSummaryResponse:
    return OrderSummaryResponse(
        order_id=str(summary.order_id),
        order_number=summary.order_number,
        customer_id=str(summary.customer_id),
        company_name=summary.company_name,
        status=summary.status,
        payment_status=summary.payment_status,
        payment_method=summary.payment_method,
        item_count=summary.item_count or 0,
        total_amount=summary.total_amount,
        created_at=summary.created_at,
    )


def _load_order(actor: Principal, order_id: str) -> Order:
    order = current_domain.repository_for(Order).get(order_id)
    actor.require_owner_or_admin(order.customer_id, "view orders")
    return order


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(customer_id: str | None = None, actor: Principal = Depends(current_principal)) -> CartResponse:
    store = CartStore(actor, customer_id)
    store.load()
    return _cart_response(store)


@cart_router.post("/items", response_model=CartResponse)
async def add_cart_item(
    body: AddCartItemRequest,
    customer_id: str | None = None,
    actor: Principal = Depends(current_principal),
) -> CartResponse:
    store = CartStore(actor, customer_id)
    store.add_item(body.product_id, body.quantity)
    return _cart_response(store)


@cart_router.put("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: str,
    body: UpdateCartQuantityRequest,
    customer_id: str | None = None,
    actor: Principal = Depends(current_principal),
) -> CartResponse:
    store = CartStore(actor, customer_id)
    store.update_quantity(product_id, body.quantity)
    return _cart_response(store)


@cart_router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(
    product_id: str,
    customer_id: str | None = None,
    actor: Principal = Depends(current_principal),
) -> CartResponse:
    store = CartStore(actor, customer_id)
    store.remove_item(product_id)
    return _cart_response(store)


@cart_router.delete("", response_model=CartResponse)
async def clear_cart(customer_id: str | None = None, actor: Principal = Depends(current_principal)) -> CartResponse:
    store = CartStore(actor, customer_id)
    store.clear()
    return _cart_response(store)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=PlacedOrderResponse)
async def create_order(body: PlaceOrderRequest, actor: Principal = Depends(current_principal)) -> PlacedOrderResponse:
    order = place_order(
        actor,
        customer_id=body.customer_id,
        address_type=body.address_type,
        ship_to=body.ship_to.model_dump() if body.ship_to else None,
        shipping_terms=body.shipping_terms,
        notes=body.notes,
        order_number=body.order_number,
    )
    return PlacedOrderResponse(
        order_id=str(order.id),
        order_number=order.order_number,
        total_amount=order.pricing.total_amount,
    )


@order_router.get("", response_model=list[OrderSummaryResponse])
async def list_my_orders(
    status: str | None = None, actor: Principal = Depends(current_principal)
) -> list[OrderSummaryResponse]:
    return [_summary_response(s) for s in list_order_summaries(actor, customer_id=actor.id, status=status)]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, actor: Principal = Depends(current_principal)) -> OrderResponse:
    return _order_response(_load_order(actor, order_id))


@order_router.post("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(order_id: str, actor: Principal = Depends(current_principal)) -> StatusResponse:
    current_domain.process(CancelOrder(**actor.as_command_fields(), order_id=order_id), asynchronous=False)
    return StatusResponse(status="cancelled")


@order_router.get("/{order_id}/shipping-estimate", response_model=ShippingEstimateResponse)
async def shipping_estimate(order_id: str, actor: Principal = Depends(current_principal)) -> ShippingEstimateResponse:
    order = _load_order(actor, order_id)
    return ShippingEstimateResponse(estimated_shipping_cost=estimate_cfr_shipping(order.pricing.total_amount))


@order_router.post("/{order_id}/checkout", response_model=CheckoutResponse)
def checkout(order_id: str, actor: Principal = Depends(current_principal)) -> CheckoutResponse:
    session = start_card_checkout(actor, order_id)
    return CheckoutResponse(session_id=session.session_id, redirect_url=session.redirect_url)


@order_router.post("/{order_id}/tt", response_model=StatusResponse)
async def request_bank_transfer(order_id: str, actor: Principal = Depends(current_principal)) -> StatusResponse:
    request_tt(actor, order_id)
    return StatusResponse(status="tt_requested")


@order_router.post("/{order_id}/remittance", status_code=201, response_model=RemittanceUploadedResponse)
async def add_remittance(
    order_id: str,
    body: UploadRemittanceRequest,
    actor: Principal = Depends(current_principal),
) -> RemittanceUploadedResponse:
    file_id = upload_remittance(actor, order_id, body.name, body.content, content_type=body.content_type)
    return RemittanceUploadedResponse(file_id=file_id)


@order_router.delete("/{order_id}/remittance/{file_id}", response_model=StatusResponse)
async def remove_remittance(
    order_id: str,
    file_id: str,
    actor: Principal = Depends(current_principal),
) -> StatusResponse:
    delete_remittance(actor, order_id, file_id)
    return StatusResponse(status="deleted")


@order_router.get("/{order_id}/invoice")
async def get_invoice(order_id: str, actor: Principal = Depends(current_principal)) -> dict:
    return jsonable_encoder(asdict(invoice_for(actor, order_id)))


# ---------------------------------------------------------------------------
# Price Router
# ---------------------------------------------------------------------------
price_router = APIRouter(prefix="/prices", tags=["prices"])


@price_router.get("/{product_id}", response_model=ResolvedPriceResponse)
async def get_price(
    product_id: str,
    customer_id: str | None = None,
    actor: Principal = Depends(current_principal),
) -> ResolvedPriceResponse:
    product = get_catalog().get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")

    resolved = resolve_price(actor, customer_id or actor.id, product)
    return ResolvedPriceResponse(
        product_id=product_id,
        list_price=resolved.list_price,
        effective_price=resolved.effective_price,
        discount_percent=resolved.discount_percent,
    )


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin", tags=["admin"])


@admin_router.get("/orders", response_model=list[OrderSummaryResponse])
async def list_all_orders(
    status: str | None = None,
    customer_id: str | None = None,
    actor: Principal = Depends(current_principal),
) -> list[OrderSummaryResponse]:
    actor.require_admin("list all orders")
    return [_summary_response(s) for s in list_order_summaries(actor, customer_id=customer_id, status=status)]


@admin_router.put("/orders/{order_id}/status", response_model=StatusResponse)
async def change_order_status(
    order_id: str,
    body: ChangeStatusRequest,
    actor: Principal = Depends(current_principal),
) -> StatusResponse:
    command = ChangeOrderStatus(
        **actor.as_command_fields(),
        order_id=order_id,
        new_status=body.status,
        expected_revision=body.expected_revision,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status=body.status)


@admin_router.put("/orders/{order_id}/lines", response_model=CorrectionResponse)
async def correct_order_lines(
    order_id: str,
    body: CorrectLinesRequest,
    actor: Principal = Depends(current_principal),
) -> CorrectionResponse:
    command = CorrectOrderLines(
        **actor.as_command_fields(),
        order_id=order_id,
        corrections=json.dumps([line.model_dump(exclude_unset=True) for line in body.lines]),
        shipping_cost=body.shipping_cost,
        expected_revision=body.expected_revision,
    )
    current_domain.process(command, asynchronous=False)

    order = current_domain.repository_for(Order).get(order_id)
    return CorrectionResponse(
        subtotal=order.pricing.subtotal,
        shipping_cost=order.pricing.shipping_cost,
        total_amount=order.pricing.total_amount,
        revision=order.revision or 0,
    )


@admin_router.post("/orders/{order_id}/payment/confirm", response_model=StatusResponse)
async def confirm_payment(
    order_id: str,
    body: ConfirmPaymentRequest,
    actor: Principal = Depends(current_principal),
) -> StatusResponse:
    command = ConfirmPayment(**actor.as_command_fields(), order_id=order_id, payment_reference=body.payment_reference)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="paid")


@admin_router.post("/orders/{order_id}/payment/reject", response_model=StatusResponse)
async def reject_payment(
    order_id: str,
    body: RejectPaymentRequest,
    actor: Principal = Depends(current_principal),
) -> StatusResponse:
    command = RejectPayment(**actor.as_command_fields(), order_id=order_id, reason=body.reason)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="failed")


@admin_router.post("/orders/{order_id}/tt/review", response_model=StatusResponse)
async def review_tt(
    order_id: str,
    body: ReviewTTRequest,
    actor: Principal = Depends(current_principal),
) -> StatusResponse:
    command = ReviewTTPayment(
        **actor.as_command_fields(),
        order_id=order_id,
        approved=body.approved,
        admin_note=body.admin_note,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="approved" if body.approved else "rejected")


@admin_router.put("/prices/{customer_id}", response_model=SetPricesResponse)
async def set_customer_prices(
    customer_id: str,
    body: SetPricesRequest,
    actor: Principal = Depends(current_principal),
) -> SetPricesResponse:
    command = SetCustomerPrices(
        **actor.as_command_fields(),
        customer_id=customer_id,
        prices=json.dumps([entry.model_dump() for entry in body.prices]),
    )
    changes = current_domain.process(command, asynchronous=False)
    return SetPricesResponse(customer_id=customer_id, changes=[PriceChangeSchema(**c) for c in changes or []])


@admin_router.get("/prices/{customer_id}/history", response_model=list[PriceHistoryEntry])
async def customer_price_history(
    customer_id: str, actor: Principal = Depends(current_principal)
) -> list[PriceHistoryEntry]:
    actor.require_admin("view price history")
    return [
        PriceHistoryEntry(
            updated_by=entry.updated_by,
            updated_at=entry.updated_at,
            changes=[PriceChangeSchema(**c) for c in json.loads(entry.changes)],
        )
        for entry in price_history(customer_id)
    ]


@admin_router.post("/products/{product_id}/prices", response_model=AffectedListsResponse)
async def backfill_product_prices(
    product_id: str,
    body: BackfillRequest,
    actor: Principal = Depends(current_principal),
) -> AffectedListsResponse:
    command = BackfillProductPrices(**actor.as_command_fields(), product_id=product_id, **body.model_dump())
    return AffectedListsResponse(price_lists=current_domain.process(command, asynchronous=False) or 0)


@admin_router.delete("/products/{product_id}/prices", response_model=AffectedListsResponse)
async def remove_product_prices(product_id: str, actor: Principal = Depends(current_principal)) -> AffectedListsResponse:
    command = RemoveProductPrices(**actor.as_command_fields(), product_id=product_id)
    return AffectedListsResponse(price_lists=current_domain.process(command, asynchronous=False) or 0)


@admin_router.put("/supplier", response_model=StatusResponse)
async def update_supplier_profile(
    body: SupplierProfileRequest,
    actor: Principal = Depends(current_principal),
) -> StatusResponse:
    command = UpdateSupplierProfile(
        **actor.as_command_fields(),
        profile=json.dumps(body.model_dump(exclude_unset=True)),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()
