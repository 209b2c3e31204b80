import threading
from datetime import date, datetime, timedelta, timezone

import storage as storage_module
from schemas import CategoryCreate, GardenerBookingCreate, OrderCreate, OrderItemCreate
from storage import REMOVED, MemStorage


def make_booking(**overrides):
    data = {
        "service_type": "maintenance",
        "date": "2026-11-02",
        "time_slot": "Morning (9AM-12PM)",
        "garden_size": "Small (< 100 sq ft)",
        "contact_name": "Asha",
        "contact_phone": "9000000000",
        "contact_email": "asha@example.com",
    }
    data.update(overrides)
    return GardenerBookingCreate(**data)


def make_order(session_id="s1"):
    return OrderCreate(
        session_id=session_id,
        subtotal=29900,
        tax=1495,
        shipping_fee=9900,
        total=41295,
        payment_method_code="cod",
        shipping_address={"city": "Pune"},
        billing_address={"city": "Pune"},
    )


def test_seeded_catalogue(storage):
    assert [c.slug for c in storage.list_categories()] == ["plants", "pots", "soil", "accessories"]
    assert len(storage.list_products()) == 12
    assert len(storage.list_services()) == 4
    assert [m.code for m in storage.list_payment_methods()] == ["card", "googlepay", "applepay", "paypal", "cod"]


def test_ids_increase_per_family():
    store = MemStorage()
    first = store.create_category(CategoryCreate(name="Plants", slug="plants"))
    second = store.create_category(CategoryCreate(name="Pots", slug="pots"))
    item = store.add_to_cart("s1", product_id=1)
    assert (first.id, second.id) == (1, 2)
    assert item.id == 1


def test_deleted_ids_are_not_reused(storage):
    item = storage.add_to_cart("s1", product_id=1)
    assert storage.remove_cart_item(item.id)
    again = storage.add_to_cart("s1", product_id=1)
    assert again.id == item.id + 1


def test_category_lookup(storage):
    plants = storage.get_category_by_slug("plants")
    assert plants.name == "Plants"
    assert storage.get_category_by_slug("cacti") is None
    assert all(p.category_id == plants.id for p in storage.list_products_by_category(plants.id))
    assert storage.list_products_by_category(999) == []


def test_featured_products_and_details(storage):
    featured = storage.list_featured_products()
    assert {p.slug for p in featured} == {"monstera-deliciosa", "snake-plant", "peace-lily", "money-plant"}
    monstera = storage.get_product_by_slug("monstera-deliciosa")
    assert storage.get_product_detail(monstera.id).light == "Bright Indirect"
    assert storage.get_product_detail(storage.get_product_by_slug("coco-peat").id) is None


def test_cart_merges_same_product(storage):
    first = storage.add_to_cart("s1", product_id=3, quantity=2)
    second = storage.add_to_cart("s1", product_id=3, quantity=3)
    assert second.id == first.id
    assert second.quantity == 5
    assert len(storage.get_cart_for_session("s1")) == 1


def test_cart_default_quantity_increment(storage):
    storage.add_to_cart("s1", product_id=3)
    item = storage.add_to_cart("s1", product_id=3)
    assert item.quantity == 2


def test_cart_lines_are_per_session(storage):
    a = storage.add_to_cart("a", product_id=3)
    b = storage.add_to_cart("b", product_id=3)
    assert a.id != b.id


def test_set_quantity(storage):
    item = storage.add_to_cart("s1", product_id=2)
    updated = storage.set_cart_item_quantity(item.id, 7)
    assert updated.quantity == 7
    assert storage.set_cart_item_quantity(item.id, 0) is REMOVED
    assert storage.get_cart_for_session("s1") == []
    assert storage.set_cart_item_quantity(item.id, 3) is None


def test_negative_quantity_removes(storage):
    item = storage.add_to_cart("s1", product_id=2)
    assert storage.set_cart_item_quantity(item.id, -1) is REMOVED
    assert storage.get_cart_item(item.id) is None


def test_remove_unknown_cart_item(storage):
    assert storage.remove_cart_item(42) is False


def test_clear_cart_only_touches_one_session(storage):
    storage.add_to_cart("a", product_id=1)
    storage.add_to_cart("a", product_id=2)
    kept = storage.add_to_cart("b", product_id=1)
    storage.clear_cart("a")
    storage.clear_cart("a")
    assert storage.get_cart_for_session("a") == []
    assert storage.get_cart_for_session("b") == [kept]


def test_booking_review_round_trip(storage):
    booking = storage.create_booking(make_booking(notes="Hedges"), session_id="s1")
    assert booking.rating is None and booking.review_text is None

    storage.update_booking_review(booking.id, 5, "Great")
    fetched = storage.get_booking(booking.id)
    assert fetched.rating == 5
    assert fetched.review_text == "Great"
    assert fetched.model_dump(exclude={"rating", "review_text"}) == booking.model_dump(exclude={"rating", "review_text"})


def test_review_unknown_booking(storage):
    assert storage.update_booking_review(99, 4, "ok") is None


def test_first_booking_adds_demo_bookings_once():
    store = MemStorage(demo_bookings=True)
    first = store.create_booking(make_booking(), session_id="s1")
    bookings = store.list_bookings()
    assert len(bookings) == 3
    assert [b.id for b in bookings] == [1, 2, 3]
    assert first.id == 1

    past, upcoming = bookings[1], bookings[2]
    assert past.rating == 4 and past.review_text
    today = date.today()
    assert past.date == (today - timedelta(days=15)).isoformat()
    assert upcoming.date == (today + timedelta(days=5)).isoformat()
    assert upcoming.rating is None
    assert all(b.session_id == "s1" for b in bookings)

    store.create_booking(make_booking(), session_id="s2")
    assert len(store.list_bookings()) == 4
    assert len(store.list_bookings_by_session("s2")) == 1


def test_demo_bookings_can_be_disabled(storage):
    storage.create_booking(make_booking(), session_id="s1")
    assert len(storage.list_bookings()) == 1


def test_order_status_refreshes_updated_at(storage, monkeypatch):
    order = storage.create_order(make_order())
    later = order.updated_at + timedelta(minutes=5)
    monkeypatch.setattr(storage_module, "utcnow", lambda: later)

    updated = storage.update_order_status(order.id, "shipped")
    assert updated.status == "shipped"
    assert updated.updated_at == later
    assert updated.created_at == order.created_at
    assert storage.update_order_status(99, "shipped") is None


def test_orders_lookup(storage):
    order = storage.create_order(make_order(session_id="s1"))
    other = storage.create_order(make_order(session_id="s2"))
    storage.create_order_item(
        OrderItemCreate(order_id=order.id, product_id=1, quantity=2, price=49900, name="Monstera", image_url="x")
    )
    assert order.order_number.startswith("ORD-") and len(order.order_number) == 12
    assert order.order_number != other.order_number
    assert storage.get_order_by_number(order.order_number).id == order.id
    assert storage.get_order_by_number("ORD-9") is None
    assert [o.order_number for o in storage.list_orders_by_session("s1")] == [order.order_number]
    assert [i.quantity for i in storage.list_order_items(order.id)] == [2]
    assert storage.list_order_items(999) == []


def test_next_order_number_skips_taken(storage, monkeypatch):
    monkeypatch.setattr(storage_module.time, "time", lambda: 1700000000.5)
    assert storage.next_order_number() == "ORD-00000500"
    storage.create_order(make_order())
    assert storage.next_order_number() == "ORD-00000501"


def test_orders_in_same_millisecond_get_distinct_numbers(storage, monkeypatch):
    monkeypatch.setattr(storage_module.time, "time", lambda: 1700000000.5)
    first = storage.create_order(make_order(session_id="a"))
    second = storage.create_order(make_order(session_id="b"))
    assert (first.order_number, second.order_number) == ("ORD-00000500", "ORD-00000501")


def test_concurrent_orders_get_distinct_numbers(storage, monkeypatch):
    monkeypatch.setattr(storage_module.time, "time", lambda: 1700000000.5)
    orders = []

    def place():
        for _ in range(25):
            orders.append(storage.create_order(make_order()))

    threads = [threading.Thread(target=place) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len({o.order_number for o in orders}) == 200


def test_concurrent_adds_to_one_line(storage):
    def add():
        for _ in range(200):
            storage.add_to_cart("s", product_id=1)

    threads = [threading.Thread(target=add) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    cart = storage.get_cart_for_session("s")
    assert len(cart) == 1
    assert cart[0].quantity == 1600



def test_payment_method_by_code(storage):
    assert storage.get_payment_method_by_code("cod").is_cash_option
    assert storage.get_payment_method_by_code("bitcoin") is None


def test_created_at_is_timezone_aware(storage):
    item = storage.add_to_cart("s1", product_id=1)
    assert item.created_at.tzinfo is not None
    assert item.created_at <= datetime.now(timezone.utc)
