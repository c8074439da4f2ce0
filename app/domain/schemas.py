# app/domain/schemas.py
from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, computed_field, model_validator

from app.domain.order_status import OrderStatus, PaymentMethod, STATUS_LABELS


# ---------------------------------------------------------------- catalog

class VariantIn(BaseModel):
    """Color/size option of a product with its own sub-stock."""

    type: str = Field(..., min_length=1, max_length=50, description="Conventionally 'color' or 'size'")
    value: str = Field(..., min_length=1, max_length=100)
    stock: int = Field(0, ge=0)


class VariantOut(BaseModel):
    id: int
    type: str
    value: str
    stock: int

    model_config = ConfigDict(from_attributes=True)


class ProductIn(BaseModel):
    """
    Validated product definition used for create and full replace.
    The variant set can never hold more units than the product itself.
    """

    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: int = Field(..., ge=0, description="Unit price in FCFA")
    image_url: Optional[str] = None
    category: Optional[str] = None
    is_active: bool = True
    stock: int = Field(0, ge=0)
    variants: List[VariantIn] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_variant_stock(self):
        variants_stock = sum(v.stock for v in self.variants)
        if variants_stock > self.stock:
            raise ValueError(
                f"Variant stock ({variants_stock}) cannot exceed total stock ({self.stock})"
            )
        return self


class ProductOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: int
    image_url: Optional[str] = None
    category: Optional[str] = None
    is_active: bool
    stock: int
    created_at: datetime
    variants: List[VariantOut] = []

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------- cart

def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


#"" and None name the same cart line
VariantValue = Annotated[Optional[str], BeforeValidator(_blank_to_none)]


class CartItem(BaseModel):
    """One cart line; identity is (product_id, color, size)."""

    product_id: int = Field(..., gt=0)
    name: str
    price: int = Field(..., ge=0, description="Price snapshot taken when added")
    quantity: int = Field(1, ge=1)
    color: VariantValue = None
    size: VariantValue = None
    category: Optional[str] = None
    image_url: Optional[str] = None

    @property
    def key(self):
        return (self.product_id, self.color, self.size)


class CartItemIn(BaseModel):
    """Name, price and image are taken from the catalog, not from the client."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, ge=1)
    color: VariantValue = None
    size: VariantValue = None


class QuantityIn(BaseModel):
    quantity: int = Field(..., description="0 or less removes the line")
    color: VariantValue = None
    size: VariantValue = None


class CartOut(BaseModel):
    session_id: str
    items: List[CartItem]
    total_price: int
    total_items: int


# ---------------------------------------------------------------- checkout

class CustomerIn(BaseModel):
    """Blank fields are rejected by the checkout workflow, not here."""

    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    address: str = ""


class CheckoutIn(BaseModel):
    customer: CustomerIn
    payment_method: PaymentMethod = PaymentMethod.ORANGE_MONEY


class PlacementOut(BaseModel):
    order_id: int
    order_number: int
    status: OrderStatus
    payment_method: PaymentMethod
    payment_status: Optional[str] = None
    total_amount: int
    checkout_url: Optional[str] = None
    tracking_url: str


# ---------------------------------------------------------------- orders

class OrderItemOut(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    unit_price: int
    total_price: int
    color_variant: Optional[str] = None
    size_variant: Optional[str] = None
    product_image_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    order_number: int
    status: OrderStatus
    total_amount: int
    delivery_fee: int
    customer_first_name: str
    customer_last_name: str
    customer_phone: str
    customer_address: str
    payment_method: str
    payment_status: Optional[str] = None
    created_at: datetime
    items: List[OrderItemOut] = []

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def status_label(self) -> str:
        return STATUS_LABELS[self.status][0]

    @computed_field
    @property
    def status_description(self) -> str:
        return STATUS_LABELS[self.status][1]


class StatusUpdateIn(BaseModel):
    status: OrderStatus


# ---------------------------------------------------------------- payments

class PaymentSuccessIn(BaseModel):
    """Body of the provider success webhook."""

    order_id: int = Field(..., alias="orderId", gt=0)

    model_config = ConfigDict(populate_by_name=True)


class PaymentConfirmationOut(BaseModel):
    success: bool
    order_id: int
    message: str
    already_processed: bool = False
    refund_required: bool = False


class PaymentLinkProduct(BaseModel):
    name: str
    category: str
    amount: int
    quantity: int
    description: str


class PaymentLinkRequest(BaseModel):
    method_of_payment: List[str]
    products: List[PaymentLinkProduct]
    success_url: str
    error_url: str
    is_escrow: bool = False
    is_merchant: bool = False
    metadata: dict = Field(default_factory=dict)


class PaymentLinkResponse(BaseModel):
    order_id: str
    checkout_url: str
    transaction_status: Optional[str] = None
    method_of_payment: List[str] = []
    amount: Optional[int] = None
    amount_to_pay: Optional[int] = None
    currency: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


# ---------------------------------------------------------------- admin

class DashboardOut(BaseModel):
    today_orders: int
    today_revenue: int
    total_products: int


class SettingsIn(BaseModel):
    company_name: Optional[str] = None
    hero_title: Optional[str] = None
    hero_subtitle: Optional[str] = None
    hero_image_url: Optional[str] = None
    logo_url: Optional[str] = None
    footer_text: Optional[str] = None


class SettingsOut(SettingsIn):
    model_config = ConfigDict(from_attributes=True)
