"""
Data Schemas for the Plant Shop API

Each Pydantic model describes one record kept by the in-memory store
(see storage.MemStorage). The "*Create" models are the insert shapes: the
same fields without the store-assigned id and timestamps.

Attributes are snake_case in Python and camelCase on the wire, so the
storefront keeps sending and receiving `productId`, `imageUrl`, ...

We store:
- Category, Product, ProductDetail (catalogue, seeded once)
- Service, PaymentMethod (static catalogues, seeded once)
- GardenerBooking (per session, reviewable)
- CartItem (per session)
- Order, OrderItem (snapshot of a cart at checkout)

Money is kept in minor currency units (paise) as integers.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ----------------------------------------------------------------------------
# Catalogue
# ----------------------------------------------------------------------------

class CategoryCreate(CamelModel):
    name: str = Field(..., description="Category display name")
    slug: str = Field(..., description="URL-friendly unique slug")


class Category(CategoryCreate):
    id: int


class ProductCreate(CamelModel):
    name: str = Field(..., description="Product name")
    slug: str = Field(..., description="URL-friendly unique slug")
    description: str = Field(..., description="Product description")
    price: int = Field(..., ge=0, description="Price in minor units")
    original_price: Optional[int] = Field(None, ge=0, description="Price before discount, minor units")
    image_url: str = Field(..., description="Primary image URL")
    category_id: int = Field(..., description="Id of the owning category (not validated)")
    in_stock: bool = Field(True, description="Availability")
    featured: bool = Field(False, description="Shown on the home page")
    rating: Optional[float] = Field(0, ge=0, le=5, description="Average rating 0-5")
    review_count: Optional[int] = Field(0, ge=0, description="Number of reviews")


class Product(ProductCreate):
    id: int


class ProductDetailCreate(CamelModel):
    """Care sheet for a plant. Zero or one per product."""
    product_id: int
    light: Optional[str] = None
    water: Optional[str] = None
    height: Optional[str] = None
    temperature: Optional[str] = None
    care_instructions: Optional[str] = None


class ProductDetail(ProductDetailCreate):
    id: int


class ProductWithDetails(Product):
    details: Optional[ProductDetail] = None


# ----------------------------------------------------------------------------
# Services & Gardener Bookings
# ----------------------------------------------------------------------------

class ServiceCreate(CamelModel):
    name: str
    description: str
    icon: str = Field(..., description="Icon name for the UI")


class Service(ServiceCreate):
    id: int


class GardenerBookingCreate(CamelModel):
    service_type: str = Field(..., min_length=1, description="Kind of gardening service")
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="Visit date, YYYY-MM-DD")
    time_slot: str = Field(..., min_length=1)
    garden_size: str = Field(..., min_length=1)
    notes: Optional[str] = None
    contact_name: str = Field(..., min_length=1)
    contact_phone: str = Field(..., min_length=1)
    contact_email: EmailStr


class GardenerBooking(GardenerBookingCreate):
    """
    Gardener bookings collection
    rating / review_text stay empty until the customer reviews the visit.
    """
    id: int
    rating: Optional[int] = None
    review_text: Optional[str] = None
    created_at: datetime
    session_id: Optional[str] = None


class ReviewRequest(CamelModel):
    rating: int
    review_text: Optional[str] = None


# ----------------------------------------------------------------------------
# Cart
# ----------------------------------------------------------------------------

class CartItem(CamelModel):
    id: int
    user_id: Optional[int] = None
    session_id: Optional[str] = None
    product_id: int
    quantity: int
    created_at: datetime


class CartLine(CartItem):
    product: Optional[Product] = None


class AddCartRequest(CamelModel):
    product_id: int
    quantity: int = Field(1, ge=1, description="Quantity to add")


class UpdateCartRequest(CamelModel):
    quantity: int


# ----------------------------------------------------------------------------
# Payment Methods & Orders
# ----------------------------------------------------------------------------

class PaymentMethodCreate(CamelModel):
    name: str
    code: str = Field(..., description="Unique machine code, e.g. 'card', 'cod'")
    icon: str
    enabled: bool = True
    requires_card_details: bool = False
    is_digital_wallet: bool = False
    is_cash_option: bool = False
    sort_order: int = 0


class PaymentMethod(PaymentMethodCreate):
    id: int


class OrderCreate(CamelModel):
    user_id: Optional[int] = None
    session_id: Optional[str] = None
    status: str = Field("pending", description="pending | processing | shipped | delivered | cancelled")
    subtotal: int = Field(..., ge=0)
    tax: int = Field(..., ge=0)
    shipping_fee: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    payment_method_code: str
    shipping_address: Dict[str, Any]
    billing_address: Dict[str, Any]
    payment_status: str = Field("pending", description="pending | paid | failed | refunded")
    notes: Optional[str] = None


class Order(OrderCreate):
    """
    Orders collection
    updated_at moves whenever the status changes.
    """
    id: int
    order_number: str
    created_at: datetime
    updated_at: datetime


class OrderItemCreate(CamelModel):
    """Product name, price and image as they were when the order was placed."""
    order_id: int
    product_id: int
    quantity: int = Field(..., ge=1)
    price: int = Field(..., ge=0)
    name: str
    image_url: str


class OrderItem(OrderItemCreate):
    id: int


class OrderWithItems(Order):
    items: List[OrderItem] = Field(default_factory=list)


class CheckoutRequest(CamelModel):
    payment_method_code: str = Field(..., min_length=1)
    shipping_address: Dict[str, Any]
    billing_address: Dict[str, Any]
    notes: Optional[str] = None


class OrderStatusRequest(CamelModel):
    status: str = Field(..., pattern=r"^(pending|processing|shipped|delivered|cancelled)$")


class PaymentIntentRequest(CamelModel):
    amount: Optional[float] = Field(None, description="Amount in major units")


class PaymentIntentResponse(CamelModel):
    client_secret: Optional[str] = None
