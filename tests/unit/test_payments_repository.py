import pytest

from travel_checkout.coupons.repository import validate_coupon
from travel_checkout.payments.repository import check_payment_by_order_code, get_payment_status


@pytest.mark.asyncio
async def test_check_by_order_code_string_flags(backend, backend_mock):
    route = backend_mock.get("/Payment/check-payment-by-ordercode").respond(json={
        "wasUpdated": "false", "paymentStatus": {"isPaid": "false", "status": "pending"},
    })
    res = await check_payment_by_order_code(backend, "123456")
    assert res == {"was_updated": False, "is_paid": False, "status": "pending"}
    assert route.calls.last.request.url.params["orderCode"] == "123456"

@pytest.mark.asyncio
async def test_check_by_order_code_pascal_case(backend, backend_mock):
    backend_mock.get("/Payment/check-payment-by-ordercode").respond(json={
        "WasUpdated": True, "PaymentStatus": {"IsPaid": "True", "Status": "paid"},
    })
    res = await check_payment_by_order_code(backend, "1")
    assert res == {"was_updated": True, "is_paid": True, "status": "paid"}

@pytest.mark.asyncio
async def test_payment_status_missing_is_pending(backend, backend_mock):
    backend_mock.get("/Payment/status/1").respond(404)
    assert await get_payment_status(backend, 1) is None

@pytest.mark.asyncio
async def test_validate_coupon_string_flag(backend, backend_mock):
    backend_mock.post("/Coupon/validate").respond(json={"isValid": "false"})
    assert await validate_coupon(backend, "SUMMER10", 12) is False
