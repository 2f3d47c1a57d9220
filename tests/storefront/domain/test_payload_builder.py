"""Tests for OrderPayloadBuilder validation and totals."""

import pytest
from protean.exceptions import ValidationError
from shared.payment import PaymentMethod
from shared.pricing import DeliveryPolicy
from storefront.cart.cart import Cart, CartLine
from storefront.cart.customization import Customization
from storefront.checkout.payload import (
    CustomerDetails,
    OrderPayloadBuilder,
    PaymentChoice,
    build_order_payload,
)


def _cart(*lines):
    return Cart(lines=tuple(lines))


def _mug(quantity=2, customization=None):
    return CartLine(product_id="P1", name="Photo Mug", unit_price=500, quantity=quantity, customization=customization)


@pytest.fixture()
def customer():
    return CustomerDetails(
        name="Rahim Uddin",
        phone="01712345678",
        district="Dhaka",
        thana="ধানমন্ডি",
        address="House 12, Road 5",
    )


@pytest.fixture()
def bkash():
    return PaymentChoice(method=PaymentMethod.BKASH, transaction_reference="8N7A6B5C", payment_number="01812345678")


class TestHomeRegionOrder:
    def test_totals(self, customer):
        payload = build_order_payload(_cart(_mug()), customer)

        assert payload.subtotal == 1000
        assert payload.delivery_fee == 60
        assert payload.total == 1060
        assert payload.remaining_on_delivery == 1060
        assert payload.advance_payment_amount is None

    def test_items_carry_line_totals(self, customer):
        payload = build_order_payload(_cart(_mug(), CartLine(product_id="P2", name="Frame", unit_price=800, quantity=1)), customer)
        assert [(item.product_id, item.line_total) for item in payload.items] == [("P1", 1000), ("P2", 800)]

    def test_cash_on_delivery_by_default(self, customer):
        payload = build_order_payload(_cart(_mug()), customer)
        assert payload.payment_info.method == "cash_on_delivery"

    def test_request_body(self, customer):
        body = build_order_payload(_cart(_mug()), customer).to_request()
        assert body["district"] == "Dhaka"
        assert body["items"][0]["unit_price"] == 500
        assert body["payment_info"] == {"method": "cash_on_delivery", "transaction_reference": None, "payment_number": None}

    def test_cart_is_not_mutated(self, cart_store, customer):
        cart_store.add("P1", "Photo Mug", 500, quantity=2)
        before = cart_store.snapshot()
        build_order_payload(cart_store.snapshot(), customer)
        assert cart_store.snapshot() == before


class TestRegionAndFees:
    def test_region_argument_overrides_customer_district(self, customer):
        payload = build_order_payload(_cart(_mug()), customer, region="Sylhet")
        assert payload.district == "Sylhet"
        assert payload.delivery_fee == 120

    def test_bangla_district_is_canonicalized(self, customer):
        payload = build_order_payload(_cart(_mug()), customer.model_copy(update={"district": "রাজশাহী"}))
        assert payload.district == "Rajshahi"

    def test_free_delivery_over_threshold(self, customer):
        payload = build_order_payload(_cart(_mug(quantity=4)), customer)
        assert payload.delivery_fee == 0
        assert payload.total == 2000

    def test_custom_policy(self, customer):
        builder = OrderPayloadBuilder(policy=DeliveryPolicy(home_fee=80, standard_fee=150, free_delivery_threshold=None))
        assert builder.build(_cart(_mug(quantity=10)), customer).delivery_fee == 80

    def test_unknown_district(self, customer):
        with pytest.raises(ValidationError) as exc:
            build_order_payload(_cart(_mug()), customer.model_copy(update={"district": "Atlantis"}))
        assert "district" in exc.value.messages


class TestValidation:
    def test_invalid_phone(self, customer):
        with pytest.raises(ValidationError) as exc:
            build_order_payload(_cart(_mug()), customer.model_copy(update={"phone": "12345"}))
        assert list(exc.value.messages) == ["phone"]

    def test_phone_with_separators_is_normalized(self, customer):
        payload = build_order_payload(_cart(_mug()), customer.model_copy(update={"phone": "+88 017-1234-5678"}))
        assert payload.phone == "+8801712345678"

    def test_empty_cart_checked_first(self):
        with pytest.raises(ValidationError) as exc:
            build_order_payload(_cart(), CustomerDetails(phone="12345"))
        assert list(exc.value.messages) == ["cart"]

    def test_missing_fields_listed_together(self, customer):
        incomplete = customer.model_copy(update={"thana": "  ", "address": None})
        with pytest.raises(ValidationError) as exc:
            build_order_payload(_cart(_mug()), incomplete)
        assert set(exc.value.messages) == {"thana", "address"}

    def test_missing_fields_before_phone_format(self):
        with pytest.raises(ValidationError) as exc:
            build_order_payload(_cart(_mug()), CustomerDetails(phone="12345"))
        assert "phone" not in exc.value.messages
        assert "name" in exc.value.messages

    def test_wallet_needs_transaction_reference(self, customer):
        with pytest.raises(ValidationError) as exc:
            build_order_payload(_cart(_mug()), customer, payment=PaymentChoice(method=PaymentMethod.NAGAD, transaction_reference=" "))
        assert "transaction_reference" in exc.value.messages

    def test_wallet_payment_accepted(self, customer, bkash):
        payload = build_order_payload(_cart(_mug()), customer, payment=bkash)
        assert payload.payment_info.method == "bkash"
        assert payload.payment_info.transaction_reference == "8N7A6B5C"


class TestCustomizedOrders:
    def test_cash_on_delivery_rejected(self, customer):
        cart = _cart(_mug(customization=Customization(custom_text="Happy Birthday")))
        with pytest.raises(ValidationError) as exc:
            build_order_payload(cart, customer)
        assert "payment_method" in exc.value.messages

    def test_default_advance(self, customer, bkash):
        cart = _cart(_mug(customization=Customization(custom_text="Happy Birthday")))
        payload = build_order_payload(cart, customer, payment=bkash)

        assert payload.advance_payment_amount == 100
        assert payload.remaining_on_delivery == 960
        assert payload.items[0].customization.custom_text == "Happy Birthday"

    def test_requested_advance_capped_at_total(self, customer, bkash):
        cart = _cart(_mug(customization=Customization(color="red")))
        payload = build_order_payload(cart, customer, payment=bkash.model_copy(update={"advance_amount": 5000}))
        assert payload.advance_payment_amount == payload.total
        assert payload.remaining_on_delivery == 0

    def test_zero_advance_rejected(self, customer, bkash):
        cart = _cart(_mug(customization=Customization(custom_text="Happy Birthday")))
        with pytest.raises(ValidationError) as exc:
            build_order_payload(cart, customer, payment=bkash.model_copy(update={"advance_amount": 0}))
        assert "advance_payment_amount" in exc.value.messages

    def test_zero_configured_advance_rejected(self, customer, bkash):
        cart = _cart(_mug(customization=Customization(color="red")))
        with pytest.raises(ValidationError):
            OrderPayloadBuilder(custom_order_advance=0).build(cart, customer, payment=bkash)

    def test_optional_advance_on_plain_order(self, customer, bkash):
        payload = build_order_payload(_cart(_mug()), customer, payment=bkash.model_copy(update={"advance_amount": 300}))
        assert payload.advance_payment_amount == 300
        assert payload.remaining_on_delivery == 760
