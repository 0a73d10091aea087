from decimal import Decimal

import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def payflow_bed():
    from payflow.domain import payflow

    bed = DomainFixture(payflow)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(payflow_bed):
    with payflow_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def _reset_adapters():
    from payflow.gateway import reset_gateway
    from payflow.order import reset_order_directory

    reset_gateway()
    reset_order_directory()
    yield
    reset_gateway()
    reset_order_directory()


@pytest.fixture
def gateway():
    from payflow.gateway import set_gateway
    from payflow.gateway.fake_adapter import FakeGateway

    fake = FakeGateway()
    set_gateway(fake)
    return fake


@pytest.fixture
def bill_address():
    from payflow.shared.address import Address

    return Address(
        firstname="Jane",
        lastname="Doe",
        address1="1 Billing Way",
        city="Springfield",
        state_name="IL",
        zipcode="62701",
        country_iso="US",
        phone="555-0100",
    )


@pytest.fixture
def ship_address():
    from payflow.shared.address import Address

    return Address(
        firstname="Jane",
        lastname="Doe",
        address1="9 Shipping Lane",
        city="Shelbyville",
        state_name="IL",
        zipcode="62565",
        country_iso="US",
    )


@pytest.fixture
def order_directory(bill_address, ship_address):
    from payflow.order import set_order_directory
    from payflow.order.fake_adapter import InMemoryOrderDirectory
    from payflow.order.port import OrderSnapshot

    directory = InMemoryOrderDirectory()
    directory.register(
        OrderSnapshot(
            order_id="ord-001",
            number="R123456789",
            email="jane@example.com",
            user_id="user-001",
            last_ip_address="127.0.0.1",
            currency="USD",
            item_total=Decimal("40.00"),
            ship_total=Decimal("5.00"),
            additional_tax_total=Decimal("5.00"),
            promo_total=Decimal("0"),
            bill_address=bill_address,
            ship_address=ship_address,
        )
    )
    set_order_directory(directory)
    return directory
