import httpx
import json
import pytest

from travel_checkout.payments.errors import (
    ConnectivityError,
    DNS_DIAGNOSTIC,
    IntegrationError,
    InvalidAmountError,
    PaymentValidationError,
    ReauthenticationRequired,
)
from travel_checkout.payments.intent import create_intent, extract_checkout_url, payment_description


def test_payment_description_truncated():
    assert payment_description("Combo Ha Long Bay 2 nights deluxe") == "Combo Ha Long Bay 2 night"
    assert len(payment_description("x" * 40)) == 25
    assert payment_description(None) == "Goi dich vu"

def test_extract_checkout_url_lookup_order():
    assert extract_checkout_url({"CheckoutUrl": "https://a", "checkoutUrl": "https://b"}) == "https://a"
    assert extract_checkout_url({"data": {"checkoutUrl": "https://c"}}) == "https://c"
    assert extract_checkout_url({"data": {"CheckoutUrl": "https://d"}}) == "https://d"
    assert extract_checkout_url({"data": {}}) is None
    assert extract_checkout_url("nope") is None

@pytest.mark.asyncio
async def test_create_intent_zero_amount_no_network(backend, backend_mock):
    route = backend_mock.post("/Payment/create-intent")
    with pytest.raises(InvalidAmountError):
        await create_intent(backend, 1, 0, "Goi dich vu")
    with pytest.raises(InvalidAmountError):
        await create_intent(backend, 1, -5, "Goi dich vu")
    assert not route.called

@pytest.mark.asyncio
async def test_create_intent_rejects_long_description(backend, backend_mock):
    route = backend_mock.post("/Payment/create-intent")
    with pytest.raises(PaymentValidationError):
        await create_intent(backend, 1, 1000, "x" * 26)
    assert not route.called

@pytest.mark.asyncio
async def test_create_intent_success(backend, backend_mock):
    route = backend_mock.post("/Payment/create-intent").respond(json={"data": {"checkoutUrl": "https://pay.test/abc"}})
    url = await create_intent(backend, 1, 14000.004, "Goi dich vu")
    assert url == "https://pay.test/abc"
    body = json.loads(route.calls.last.request.content)
    assert body == {"BookingId": 1, "Amount": 14000.0, "Description": "Goi dich vu"}
    assert route.calls.last.request.headers["Authorization"] == "Bearer fake-token"

@pytest.mark.asyncio
async def test_create_intent_without_url_is_integration_error(backend, backend_mock):
    backend_mock.post("/Payment/create-intent").respond(json={"ok": True})
    with pytest.raises(IntegrationError) as exc:
        await create_intent(backend, 1, 1000, "Goi dich vu")
    assert exc.value.status_code == 502

@pytest.mark.asyncio
async def test_create_intent_dns_failure_diagnostic(backend, backend_mock):
    backend_mock.post("/Payment/create-intent").respond(500, json={"error": "No such host is known (api-merchant.payos.vn)"})
    with pytest.raises(IntegrationError) as exc:
        await create_intent(backend, 1, 1000, "Goi dich vu")
    assert exc.value.detail == DNS_DIAGNOSTIC

@pytest.mark.asyncio
async def test_create_intent_status_mapping(backend, backend_mock):
    route = backend_mock.post("/Payment/create-intent")
    route.respond(400, json={"message": "Montant invalide"})
    with pytest.raises(PaymentValidationError) as exc:
        await create_intent(backend, 1, 1000, "Goi dich vu")
    assert exc.value.detail == "Montant invalide"

    route.respond(401)
    with pytest.raises(ReauthenticationRequired):
        await create_intent(backend, 1, 1000, "Goi dich vu")

    route.mock(side_effect=httpx.ConnectError("refused"))
    with pytest.raises(ConnectivityError) as exc:
        await create_intent(backend, 1, 1000, "Goi dich vu")
    assert exc.value.status_code == 503
