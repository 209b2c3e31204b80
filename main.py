import logging
import os
import uuid
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Tuple

import stripe
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from payments import PaymentGateway, PaymentNotConfigured
from schemas import (
    AddCartRequest,
    CartItem,
    CartLine,
    Category,
    CheckoutRequest,
    GardenerBooking,
    GardenerBookingCreate,
    OrderCreate,
    OrderItemCreate,
    OrderStatusRequest,
    OrderWithItems,
    PaymentIntentRequest,
    PaymentIntentResponse,
    PaymentMethod,
    Product,
    ProductWithDetails,
    ReviewRequest,
    Service,
    UpdateCartRequest,
)
from seed import seed_data
from storage import REMOVED, MemStorage

# ----------------------------------------------------------------------------
# Configuration
# ----------------------------------------------------------------------------

STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
PAYMENT_CURRENCY = os.getenv("PAYMENT_CURRENCY", "inr")
TAX_RATE = Decimal(os.getenv("TAX_RATE", "0.05"))
FREE_SHIPPING_THRESHOLD = int(os.getenv("FREE_SHIPPING_THRESHOLD", "100000"))  # Rs 1000
SHIPPING_FEE = int(os.getenv("SHIPPING_FEE", "9900"))  # Rs 99
DEMO_BOOKINGS = os.getenv("DEMO_BOOKINGS", "1").lower() not in ("0", "false", "no")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

SESSION_HEADER = "session_id"

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------------
# Utilities
# ----------------------------------------------------------------------------

def resolve_session_id(header_value: Optional[str]) -> str:
    """Trust a session id the client sent, or mint a new one."""
    if header_value:
        return header_value
    return str(uuid.uuid4())


def session_id(request: Request, response: Response) -> str:
    sid = resolve_session_id(request.headers.get(SESSION_HEADER))
    # error handlers build a fresh response, so they re-read it from request.state
    request.state.session_id = sid
    response.headers[SESSION_HEADER] = sid
    return sid


def get_storage(request: Request) -> MemStorage:
    return request.app.state.storage


def get_payments(request: Request) -> PaymentGateway:
    return request.app.state.payments


def order_totals(subtotal: int) -> Tuple[int, int, int]:
    """Return (tax, shipping_fee, total) for a subtotal in minor units."""
    tax = int((Decimal(subtotal) * TAX_RATE).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    shipping_fee = 0 if subtotal >= FREE_SHIPPING_THRESHOLD else SHIPPING_FEE
    return tax, shipping_fee, subtotal + tax + shipping_fee


router = APIRouter(prefix="/api")


# ----------------------------------------------------------------------------
# Catalogue
# ----------------------------------------------------------------------------

@router.get("/categories", response_model=List[Category])
def list_categories(storage: MemStorage = Depends(get_storage)):
    return storage.list_categories()


@router.get("/products", response_model=List[Product])
def list_products(category: Optional[str] = Query(None), storage: MemStorage = Depends(get_storage)):
    if category:
        found = storage.get_category_by_slug(category)
        if found is None:
            raise HTTPException(status_code=404, detail="Category not found")
        return storage.list_products_by_category(found.id)
    return storage.list_products()


@router.get("/products/featured", response_model=List[Product])
def list_featured_products(storage: MemStorage = Depends(get_storage)):
    return storage.list_featured_products()


@router.get("/products/{slug}", response_model=ProductWithDetails)
def get_product(slug: str, storage: MemStorage = Depends(get_storage)):
    product = storage.get_product_by_slug(slug)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return ProductWithDetails(**product.model_dump(), details=storage.get_product_detail(product.id))


@router.get("/services", response_model=List[Service])
def list_services(storage: MemStorage = Depends(get_storage)):
    return storage.list_services()


# ----------------------------------------------------------------------------
# Gardener Bookings
# ----------------------------------------------------------------------------

@router.get("/gardener-bookings", response_model=List[GardenerBooking])
def list_bookings(
    mine: bool = Query(False, description="Only bookings made in this session"),
    sid: str = Depends(session_id),
    storage: MemStorage = Depends(get_storage),
):
    if mine:
        return storage.list_bookings_by_session(sid)
    return storage.list_bookings()


@router.post("/gardener-booking", response_model=GardenerBooking, status_code=201)
def create_booking(
    body: GardenerBookingCreate,
    sid: str = Depends(session_id),
    storage: MemStorage = Depends(get_storage),
):
    return storage.create_booking(body, session_id=sid)


@router.put("/gardener-booking/{booking_id}/review", response_model=GardenerBooking)
def review_booking(booking_id: int, body: ReviewRequest, storage: MemStorage = Depends(get_storage)):
    if body.rating < 1 or body.rating > 5:
        raise HTTPException(status_code=400, detail="Rating must be between 1 and 5")
    if storage.get_booking(booking_id) is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    return storage.update_booking_review(booking_id, body.rating, body.review_text)


# ----------------------------------------------------------------------------
# Cart
# ----------------------------------------------------------------------------

@router.get("/cart", response_model=List[CartLine])
def get_cart(sid: str = Depends(session_id), storage: MemStorage = Depends(get_storage)):
    return [
        CartLine(**item.model_dump(), product=storage.get_product(item.product_id))
        for item in storage.get_cart_for_session(sid)
    ]


@router.post("/cart", response_model=CartItem, status_code=201)
def add_to_cart(body: AddCartRequest, sid: str = Depends(session_id), storage: MemStorage = Depends(get_storage)):
    if storage.get_product(body.product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return storage.add_to_cart(sid, body.product_id, body.quantity)


@router.patch("/cart/{item_id}")
def update_cart_item(item_id: int, body: UpdateCartRequest, storage: MemStorage = Depends(get_storage)):
    if body.quantity < 0:
        raise HTTPException(status_code=400, detail="Invalid quantity")
    if storage.get_cart_item(item_id) is None:
        raise HTTPException(status_code=404, detail="Cart item not found")
    result = storage.set_cart_item_quantity(item_id, body.quantity)
    if result is None:
        raise HTTPException(status_code=404, detail="Cart item not found")
    if result is REMOVED:
        return {"deleted": True}
    return result


@router.delete("/cart/{item_id}", status_code=204)
def remove_cart_item(item_id: int, storage: MemStorage = Depends(get_storage)):
    if not storage.remove_cart_item(item_id):
        raise HTTPException(status_code=404, detail="Cart item not found")


@router.delete("/cart", status_code=204)
def clear_cart(sid: str = Depends(session_id), storage: MemStorage = Depends(get_storage)):
    storage.clear_cart(sid)


# ----------------------------------------------------------------------------
# Payment Methods & Orders
# ----------------------------------------------------------------------------

@router.get("/payment-methods", response_model=List[PaymentMethod])
def list_payment_methods(storage: MemStorage = Depends(get_storage)):
    return storage.list_payment_methods()


@router.post("/orders", response_model=OrderWithItems, status_code=201)
def create_order(body: CheckoutRequest, sid: str = Depends(session_id), storage: MemStorage = Depends(get_storage)):
    cart = storage.get_cart_for_session(sid)
    if not cart:
        raise HTTPException(status_code=400, detail="Cart is empty")

    method = storage.get_payment_method_by_code(body.payment_method_code)
    if method is None or not method.enabled:
        raise HTTPException(status_code=400, detail="Unknown payment method")

    # Snapshot product data now so the order survives catalogue changes
    lines = [(item, storage.get_product(item.product_id)) for item in cart]
    subtotal = sum(p.price * item.quantity for item, p in lines if p is not None)
    tax, shipping_fee, total = order_totals(subtotal)

    order = storage.create_order(
        OrderCreate(
            session_id=sid,
            status="pending",
            subtotal=subtotal,
            tax=tax,
            shipping_fee=shipping_fee,
            total=total,
            payment_method_code=method.code,
            shipping_address=body.shipping_address,
            billing_address=body.billing_address,
            notes=body.notes,
        )
    )
    items = [
        storage.create_order_item(
            OrderItemCreate(
                order_id=order.id,
                product_id=item.product_id,
                quantity=item.quantity,
                price=p.price if p else 0,
                name=p.name if p else "Unknown Product",
                image_url=p.image_url if p else "",
            )
        )
        for item, p in lines
    ]
    storage.clear_cart(sid)

    logger.info("Order %s placed: %d items, total %d", order.order_number, len(items), total)
    return OrderWithItems(**order.model_dump(), items=items)


@router.get("/orders", response_model=List[OrderWithItems])
def list_orders(sid: str = Depends(session_id), storage: MemStorage = Depends(get_storage)):
    return [
        OrderWithItems(**o.model_dump(), items=storage.list_order_items(o.id))
        for o in storage.list_orders_by_session(sid)
    ]


@router.get("/orders/{order_number}", response_model=OrderWithItems)
def get_order(order_number: str, storage: MemStorage = Depends(get_storage)):
    order = storage.get_order_by_number(order_number)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return OrderWithItems(**order.model_dump(), items=storage.list_order_items(order.id))


@router.patch("/orders/{order_number}/status", response_model=OrderWithItems)
def update_order_status(order_number: str, body: OrderStatusRequest, storage: MemStorage = Depends(get_storage)):
    order = storage.get_order_by_number(order_number)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    order = storage.update_order_status(order.id, body.status)
    return OrderWithItems(**order.model_dump(), items=storage.list_order_items(order.id))


# ----------------------------------------------------------------------------
# Stripe
# ----------------------------------------------------------------------------

@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
def create_payment_intent(body: PaymentIntentRequest, payments: PaymentGateway = Depends(get_payments)):
    if body.amount is None or body.amount <= 0:
        raise HTTPException(status_code=400, detail="Invalid amount provided")
    try:
        client_secret = payments.create_intent(body.amount)
    except PaymentNotConfigured as e:
        logger.error("Payment intent requested but %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    except stripe.StripeError:
        logger.exception("Error creating payment intent")
        raise HTTPException(status_code=500, detail="Error creating payment intent")
    return PaymentIntentResponse(client_secret=client_secret)


# ----------------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------------

def echo_session(request: Request, response: Response) -> Response:
    sid = getattr(request.state, "session_id", None)
    if sid:
        response.headers[SESSION_HEADER] = sid
    return response


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return echo_session(request, await http_exception_handler(request, exc))


async def validation_error_handler(request: Request, exc: RequestValidationError):
    response = JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})
    return echo_session(request, response)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ----------------------------------------------------------------------------
# App
# ----------------------------------------------------------------------------

def create_app(storage: Optional[MemStorage] = None, payments: Optional[PaymentGateway] = None) -> FastAPI:
    if storage is None:
        storage = MemStorage(demo_bookings=DEMO_BOOKINGS)
        seed_data(storage)

    app = FastAPI(title="Plant Shop API")
    app.state.storage = storage
    app.state.payments = payments or PaymentGateway(STRIPE_SECRET_KEY, currency=PAYMENT_CURRENCY)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[SESSION_HEADER],
    )
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(router)

    @app.get("/")
    def root():
        return {"message": "Plant Shop API running"}

    @app.get("/test")
    def diagnostics():
        return {
            "backend": "✅ Running",
            "store": app.state.storage.counts(),
            "stripe": "✅ Configured" if app.state.payments.configured else "⚠️ Missing STRIPE_SECRET_KEY",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
