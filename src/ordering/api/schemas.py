"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands.
"""

from datetime import datetime

from pydantic import Base64Bytes, BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShipToSchema(BaseModel):
    company_name: str | None = None
    contact_name: str | None = None
    tel_no: str | None = None
    mob_no: str | None = None
    address: str = ""
    email: str | None = None


class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddCartItemRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartQuantityRequest(BaseModel):
    # Values below 1 are accepted and ignored by the cart
    quantity: int


class CartLineResponse(BaseModel):
    product_id: str
    name: str
    unit_price: float
    discount_unit_price: float | None = None
    effective_price: float
    quantity: int
    line_total: float
    image_ref: str | None = None
    category_name: str | None = None


class CartResponse(BaseModel):
    customer_id: str
    lines: list[CartLineResponse]
    total_items: int
    total_amount: float
    revision: int
    attention: bool = False
    persisted: bool = True


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    customer_id: str | None = None  # Admins may place on a customer's behalf
    address_type: str = Field(default="default", pattern="^(default|new)$")
    ship_to: ShipToSchema | None = None
    shipping_terms: str = Field(default="FOB", pattern="^(FOB|CFR)$")
    notes: str | None = None
    order_number: str | None = None  # Resend the number from a failed attempt to retry safely

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "address_type": "new",
                    "ship_to": {
                        "company_name": "Acme Trading",
                        "contact_name": "J. Park",
                        "address": "12 Harbour Road, Busan",
                    },
                    "shipping_terms": "CFR",
                }
            ]
        }
    }


class PlacedOrderResponse(BaseModel):
    order_id: str
    order_number: str
    total_amount: float


class OrderItemResponse(BaseModel):
    product_id: str
    name: str
    price: float
    discount_price: float | None = None
    quantity: int
    image_ref: str | None = None
    category_name: str | None = None


class RemittanceFileResponse(BaseModel):
    id: str
    name: str
    url: str
    uploaded_at: datetime


class TTPaymentResponse(BaseModel):
    status: str | None = None
    admin_note: str | None = None
    remittance_files: list[RemittanceFileResponse] = []


class OrderResponse(BaseModel):
    id: str
    order_number: str
    customer_id: str
    customer_email: str | None = None
    company_name: str | None = None
    items: list[OrderItemResponse]
    ship_to: ShipToSchema | None = None
    shipping_terms: str
    subtotal: float
    shipping_cost: float
    total_amount: float
    status: str
    payment_status: str
    payment_method: str | None = None
    payment_id: str | None = None
    tt_payment: TTPaymentResponse | None = None
    notes: str | None = None
    revision: int
    created_at: datetime | None = None
    created_by: str | None = None
    updated_at: datetime | None = None
    updated_by: str | None = None


class OrderSummaryResponse(BaseModel):
    order_id: str
    order_number: str
    customer_id: str
    company_name: str | None = None
    status: str
    payment_status: str
    payment_method: str | None = None
    item_count: int
    total_amount: float | None = None
    created_at: datetime | None = None


class ShippingEstimateResponse(BaseModel):
    shipping_terms: str = "CFR"
    estimated_shipping_cost: float


class CheckoutResponse(BaseModel):
    session_id: str
    redirect_url: str | None = None


class UploadRemittanceRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    content: Base64Bytes
    content_type: str | None = None


class RemittanceUploadedResponse(BaseModel):
    file_id: str


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------
class ChangeStatusRequest(BaseModel):
    status: str
    expected_revision: int | None = None


class LineCorrectionSchema(BaseModel):
    product_id: str
    quantity: int | None = Field(default=None, ge=1)
    discount_price: float | None = Field(default=None, ge=0)
    line_subtotal: float | None = Field(default=None, ge=0)


class CorrectLinesRequest(BaseModel):
    lines: list[LineCorrectionSchema] = []
    shipping_cost: float | None = Field(default=None, ge=0)
    expected_revision: int | None = None


class CorrectionResponse(BaseModel):
    subtotal: float
    shipping_cost: float
    total_amount: float
    revision: int


class ConfirmPaymentRequest(BaseModel):
    payment_reference: str | None = None


class RejectPaymentRequest(BaseModel):
    reason: str | None = None


class ReviewTTRequest(BaseModel):
    approved: bool
    admin_note: str | None = None


class PriceEntrySchema(BaseModel):
    product_id: str
    unit_price: float = Field(ge=0)
    product_name: str | None = None
    category_id: str | None = None
    category_name: str | None = None


class SetPricesRequest(BaseModel):
    prices: list[PriceEntrySchema]


class PriceChangeSchema(BaseModel):
    product_id: str
    product_name: str | None = None
    previous_price: float | None = None
    new_price: float


class SetPricesResponse(BaseModel):
    customer_id: str
    changes: list[PriceChangeSchema]


class PriceHistoryEntry(BaseModel):
    updated_by: str
    updated_at: datetime
    changes: list[PriceChangeSchema]


class BackfillRequest(BaseModel):
    product_name: str | None = None
    category_id: str | None = None
    category_name: str | None = None
    list_price: float = Field(ge=0)


class AffectedListsResponse(BaseModel):
    price_lists: int


class ResolvedPriceResponse(BaseModel):
    product_id: str
    list_price: float
    effective_price: float
    discount_percent: int | None = None


class BankDetailsSchema(BaseModel):
    bank_name: str | None = None
    account_number: str | None = None
    account_holder: str | None = None
    swift_code: str | None = None


class ShipmentDetailsSchema(BaseModel):
    origin: str | None = None
    shipment: str | None = None
    packing: str | None = None
    validity: str | None = None


class SupplierProfileRequest(BaseModel):
    company_name: str | None = None
    trading_name: str | None = None
    business_number: str | None = None
    address: str | None = None
    tel_no: str | None = None
    fax_no: str | None = None
    contact_info: str | None = None
    logo_url: str | None = None
    bank: BankDetailsSchema | None = None
    shipping: ShipmentDetailsSchema | None = None
