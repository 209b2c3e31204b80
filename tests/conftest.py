import pytest
from fastapi.testclient import TestClient

from main import create_app
from payments import PaymentGateway
from seed import seed_data
from storage import MemStorage


@pytest.fixture
def storage():
    store = MemStorage(demo_bookings=False)
    seed_data(store)
    return store


@pytest.fixture
def payments():
    return PaymentGateway("sk_test_dummy", currency="inr")


@pytest.fixture
def client(storage, payments):
    app = create_app(storage=storage, payments=payments)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def session():
    return {"session_id": "session-a"}


@pytest.fixture
def checkout_body():
    address = {"name": "Asha Rao", "line1": "12 MG Road", "city": "Bengaluru", "pincode": "560001"}
    return {"paymentMethodCode": "cod", "shippingAddress": address, "billingAddress": address}
