"""
In-memory store for the Plant Shop API.

MemStorage is the only place application state lives. Every collection is a
dict from an integer id to a record; ids come from one counter per entity
family, start at 1 and are never reused. Lookups are plain scans.

Absent records are reported by returning None (or False), never by raising.
No cross-entity checks are made: a cart line may point at a product that
does not exist.
"""

import itertools
import logging
import threading
import time
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional, Union

from schemas import (
    CartItem,
    Category,
    CategoryCreate,
    GardenerBooking,
    GardenerBookingCreate,
    Order,
    OrderCreate,
    OrderItem,
    OrderItemCreate,
    PaymentMethod,
    PaymentMethodCreate,
    Product,
    ProductCreate,
    ProductDetail,
    ProductDetailCreate,
    Service,
    ServiceCreate,
)

logger = logging.getLogger(__name__)


class _Removed:
    def __repr__(self):
        return "REMOVED"


# Returned by set_cart_item_quantity when the line was deleted.
REMOVED = _Removed()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemStorage:
    def __init__(self, demo_bookings: bool = True):
        self.demo_bookings = demo_bookings

        self.categories: Dict[int, Category] = {}
        self.products: Dict[int, Product] = {}
        self.product_details: Dict[int, ProductDetail] = {}
        self.services: Dict[int, Service] = {}
        self.gardener_bookings: Dict[int, GardenerBooking] = {}
        self.cart_items: Dict[int, CartItem] = {}
        self.payment_methods: Dict[int, PaymentMethod] = {}
        self.orders: Dict[int, Order] = {}
        self.order_items: Dict[int, OrderItem] = {}

        self._ids = {
            name: itertools.count(1)
            for name in (
                "category", "product", "product_detail", "service", "gardener_booking",
                "cart_item", "payment_method", "order", "order_item",
            )
        }
        self._bookings_created = 0
        # Held for every mutation and every snapshot read.
        self._lock = threading.RLock()

    def _next_id(self, kind: str) -> int:
        return next(self._ids[kind])

    def _values(self, collection: dict) -> list:
        with self._lock:
            return list(collection.values())

    # ------------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------------

    def list_categories(self) -> List[Category]:
        return self._values(self.categories)

    def get_category_by_slug(self, slug: str) -> Optional[Category]:
        return next((c for c in self._values(self.categories) if c.slug == slug), None)

    def create_category(self, data: CategoryCreate) -> Category:
        with self._lock:
            category = Category(id=self._next_id("category"), **data.model_dump())
            self.categories[category.id] = category
            return category

    # ------------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------------

    def list_products(self) -> List[Product]:
        return self._values(self.products)

    def list_products_by_category(self, category_id: int) -> List[Product]:
        return [p for p in self._values(self.products) if p.category_id == category_id]

    def get_product(self, product_id: int) -> Optional[Product]:
        return self.products.get(product_id)

    def get_product_by_slug(self, slug: str) -> Optional[Product]:
        return next((p for p in self._values(self.products) if p.slug == slug), None)

    def list_featured_products(self) -> List[Product]:
        return [p for p in self._values(self.products) if p.featured]

    def create_product(self, data: ProductCreate) -> Product:
        with self._lock:
            product = Product(id=self._next_id("product"), **data.model_dump())
            self.products[product.id] = product
            return product

    def get_product_detail(self, product_id: int) -> Optional[ProductDetail]:
        return next((d for d in self._values(self.product_details) if d.product_id == product_id), None)

    def create_product_detail(self, data: ProductDetailCreate) -> ProductDetail:
        with self._lock:
            detail = ProductDetail(id=self._next_id("product_detail"), **data.model_dump())
            self.product_details[detail.id] = detail
            return detail

    # ------------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------------

    def list_services(self) -> List[Service]:
        return self._values(self.services)

    def create_service(self, data: ServiceCreate) -> Service:
        with self._lock:
            service = Service(id=self._next_id("service"), **data.model_dump())
            self.services[service.id] = service
            return service

    # ------------------------------------------------------------------------
    # Gardener Bookings
    # ------------------------------------------------------------------------

    def list_bookings(self) -> List[GardenerBooking]:
        return self._values(self.gardener_bookings)

    def list_bookings_by_session(self, session_id: str) -> List[GardenerBooking]:
        return [b for b in self._values(self.gardener_bookings) if b.session_id == session_id]

    def get_booking(self, booking_id: int) -> Optional[GardenerBooking]:
        return self.gardener_bookings.get(booking_id)

    def create_booking(self, data: GardenerBookingCreate, session_id: Optional[str] = None) -> GardenerBooking:
        with self._lock:
            booking = GardenerBooking(
                id=self._next_id("gardener_booking"),
                created_at=utcnow(),
                session_id=session_id,
                rating=None,
                review_text=None,
                **data.model_dump(),
            )
            self.gardener_bookings[booking.id] = booking
            self._bookings_created += 1
            if self.demo_bookings and self._bookings_created == 1:
                self._add_demo_bookings(session_id)
            return booking

    def _add_demo_bookings(self, session_id: Optional[str]) -> None:
        """One reviewed visit 15 days back and one upcoming visit in 5 days."""
        today = date.today()
        past = today - timedelta(days=15)
        upcoming = today + timedelta(days=5)
        contact = {
            "contact_name": "John Doe",
            "contact_phone": "9876543210",
            "contact_email": "john@example.com",
        }
        samples = [
            GardenerBooking(
                id=self._next_id("gardener_booking"),
                service_type="maintenance",
                date=past.isoformat(),
                time_slot="Morning (9AM-12PM)",
                garden_size="Medium (100-500 sq ft)",
                notes="Trimmed the hedges and removed weeds",
                created_at=datetime.combine(past, utcnow().timetz()),
                session_id=session_id,
                rating=4,
                review_text="Great service! The gardener was very knowledgeable and helpful.",
                **contact,
            ),
            GardenerBooking(
                id=self._next_id("gardener_booking"),
                service_type="planting",
                date=upcoming.isoformat(),
                time_slot="Afternoon (1PM-4PM)",
                garden_size="Small (< 100 sq ft)",
                notes="Need help with planting new flowers in the garden",
                created_at=utcnow(),
                session_id=session_id,
                **contact,
            ),
        ]
        for sample in samples:
            self.gardener_bookings[sample.id] = sample
        logger.debug("Added %d demo bookings for session %s", len(samples), session_id)

    def update_booking_review(
        self, booking_id: int, rating: int, review_text: Optional[str]
    ) -> Optional[GardenerBooking]:
        with self._lock:
            booking = self.gardener_bookings.get(booking_id)
            if booking is None:
                return None
            updated = booking.model_copy(update={"rating": rating, "review_text": review_text})
            self.gardener_bookings[booking_id] = updated
            return updated

    # ------------------------------------------------------------------------
    # Cart
    # ------------------------------------------------------------------------

    def get_cart_for_session(self, session_id: str) -> List[CartItem]:
        return [i for i in self._values(self.cart_items) if i.session_id == session_id]

    def get_cart_item(self, item_id: int) -> Optional[CartItem]:
        return self.cart_items.get(item_id)

    def add_to_cart(self, session_id: str, product_id: int, quantity: int = 1) -> CartItem:
        """Add a product to the session's cart, merging into an existing line."""
        with self._lock:
            existing = next(
                (i for i in self._values(self.cart_items)
                 if i.session_id == session_id and i.product_id == product_id),
                None,
            )
            if existing is not None:
                updated = existing.model_copy(update={"quantity": existing.quantity + quantity})
                self.cart_items[existing.id] = updated
                return updated

            item = CartItem(
                id=self._next_id("cart_item"),
                session_id=session_id,
                product_id=product_id,
                quantity=quantity,
                created_at=utcnow(),
            )
            self.cart_items[item.id] = item
            return item

    def set_cart_item_quantity(self, item_id: int, quantity: int) -> Union[CartItem, _Removed, None]:
        """
        Set a line's quantity. Returns the updated line, REMOVED when the
        quantity was zero or less (the line is deleted), or None when the
        id is unknown.
        """
        with self._lock:
            item = self.cart_items.get(item_id)
            if item is None:
                return None
            if quantity <= 0:
                del self.cart_items[item_id]
                return REMOVED
            updated = item.model_copy(update={"quantity": quantity})
            self.cart_items[item_id] = updated
            return updated

    def remove_cart_item(self, item_id: int) -> bool:
        with self._lock:
            return self.cart_items.pop(item_id, None) is not None

    def clear_cart(self, session_id: str) -> None:
        with self._lock:
            for item_id in [i.id for i in self._values(self.cart_items) if i.session_id == session_id]:
                del self.cart_items[item_id]

    # ------------------------------------------------------------------------
    # Payment Methods
    # ------------------------------------------------------------------------

    def list_payment_methods(self) -> List[PaymentMethod]:
        return sorted(self._values(self.payment_methods), key=lambda m: m.sort_order)

    def get_payment_method_by_code(self, code: str) -> Optional[PaymentMethod]:
        return next((m for m in self._values(self.payment_methods) if m.code == code), None)

    def create_payment_method(self, data: PaymentMethodCreate) -> PaymentMethod:
        with self._lock:
            method = PaymentMethod(id=self._next_id("payment_method"), **data.model_dump())
            self.payment_methods[method.id] = method
            return method

    # ------------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------------

    def next_order_number(self) -> str:
        """ORD- plus the last 8 digits of the millisecond clock, bumped past taken numbers."""
        with self._lock:
            stamp = int(time.time() * 1000) % 10 ** 8
            while True:
                number = f"ORD-{stamp:08d}"
                if self.get_order_by_number(number) is None:
                    return number
                stamp = (stamp + 1) % 10 ** 8

    def create_order(self, data: OrderCreate) -> Order:
        with self._lock:
            now = utcnow()
            order = Order(
                id=self._next_id("order"),
                order_number=self.next_order_number(),
                created_at=now,
                updated_at=now,
                **data.model_dump(),
            )
            self.orders[order.id] = order
            return order

    def list_orders_by_session(self, session_id: str) -> List[Order]:
        return [o for o in self._values(self.orders) if o.session_id == session_id]

    def get_order_by_number(self, order_number: str) -> Optional[Order]:
        return next((o for o in self._values(self.orders) if o.order_number == order_number), None)

    def update_order_status(self, order_id: int, status: str) -> Optional[Order]:
        with self._lock:
            order = self.orders.get(order_id)
            if order is None:
                return None
            updated = order.model_copy(update={"status": status, "updated_at": utcnow()})
            self.orders[order_id] = updated
            return updated

    def create_order_item(self, data: OrderItemCreate) -> OrderItem:
        with self._lock:
            item = OrderItem(id=self._next_id("order_item"), **data.model_dump())
            self.order_items[item.id] = item
            return item

    def list_order_items(self, order_id: int) -> List[OrderItem]:
        return [i for i in self._values(self.order_items) if i.order_id == order_id]

    # ------------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------------

    def counts(self) -> Dict[str, int]:
        return {
            "categories": len(self.categories),
            "products": len(self.products),
            "services": len(self.services),
            "gardener_bookings": len(self.gardener_bookings),
            "cart_items": len(self.cart_items),
            "payment_methods": len(self.payment_methods),
            "orders": len(self.orders),
        }
