import pytest

from travel_checkout.bookings.models import AttachedCoupon, Booking, CheckoutSession, PaymentStatus
from travel_checkout.checkout import service as svc
from travel_checkout.infra.backend_client import BackendNotFoundError, BackendRequestError
from travel_checkout.payments.errors import CouponRejected

SESSION = CheckoutSession(access_token="t", user_id=7, role="customer")


@pytest.fixture()
def coupon_api(monkeypatch):
    state = {
        "booking": Booking(id=1, quantity=2, unit_price=5000, total_amount=10000, combo_id=12),
        "valid": True,
        "discount": 1000,
        "applied": [],
        "removed": [],
        "loads": 0,
    }

    async def fake_fetch_booking(client, booking_id, fallback_role=""):
        state["loads"] += 1
        return state["booking"]
    async def fake_validate(client, code, combo_id):
        return state["valid"]
    async def fake_calculate(client, code, amount):
        if isinstance(state["discount"], Exception):
            raise state["discount"]
        return state["discount"]
    async def fake_apply(client, booking_id, code):
        state["applied"].append((booking_id, code))
        state["booking"] = state["booking"].model_copy(update={"total_amount": 9000, "attached_coupon": AttachedCoupon(code=code)})
    async def fake_remove(client, booking_id, code):
        state["removed"].append((booking_id, code))
    async def fake_payment_status(client, booking_id):
        return None
    async def no_add_ons(client, combo_id):
        return []

    monkeypatch.setattr("travel_checkout.bookings.repository.fetch_booking", fake_fetch_booking)
    monkeypatch.setattr("travel_checkout.bookings.repository.fetch_combo_details", no_add_ons)
    monkeypatch.setattr("travel_checkout.coupons.repository.validate_coupon", fake_validate)
    monkeypatch.setattr("travel_checkout.coupons.repository.calculate_discount", fake_calculate)
    monkeypatch.setattr("travel_checkout.coupons.repository.apply_coupon", fake_apply)
    monkeypatch.setattr("travel_checkout.coupons.repository.remove_coupon", fake_remove)
    monkeypatch.setattr("travel_checkout.payments.repository.get_payment_status", fake_payment_status)
    return state

@pytest.mark.asyncio
async def test_apply_coupon_reloads_and_reconciles(coupon_api):
    summary = await svc.apply_coupon(object(), 1, " SUMMER10 ", SESSION)
    assert coupon_api["applied"] == [(1, "SUMMER10")]
    assert coupon_api["loads"] == 2
    assert summary.coupon_code == "SUMMER10"
    assert summary.discount_applied
    assert summary.totals.original_total == 10000
    assert summary.totals.final_payable == 9000

@pytest.mark.asyncio
@pytest.mark.parametrize("code", ["", "   "])
async def test_apply_coupon_empty_code(coupon_api, code):
    with pytest.raises(CouponRejected):
        await svc.apply_coupon(object(), 1, code, SESSION)
    assert coupon_api["loads"] == 0

@pytest.mark.asyncio
async def test_apply_coupon_invalid_or_useless(coupon_api):
    coupon_api["valid"] = False
    with pytest.raises(CouponRejected) as exc:
        await svc.apply_coupon(object(), 1, "NOPE", SESSION)
    assert exc.value.status_code == 400

    coupon_api["valid"] = True
    coupon_api["discount"] = 0
    with pytest.raises(CouponRejected):
        await svc.apply_coupon(object(), 1, "ZERO", SESSION)
    assert coupon_api["applied"] == []

@pytest.mark.asyncio
async def test_apply_coupon_backend_errors(coupon_api):
    coupon_api["discount"] = BackendNotFoundError("backend_not_found", status_code=404)
    with pytest.raises(CouponRejected) as exc:
        await svc.apply_coupon(object(), 1, "GHOST", SESSION)
    assert exc.value.status_code == 404

    coupon_api["discount"] = BackendRequestError("x", status_code=400, payload={"message": "Coupon expiré"})
    with pytest.raises(CouponRejected) as exc:
        await svc.apply_coupon(object(), 1, "OLD", SESSION)
    assert exc.value.detail == "Coupon expiré"

@pytest.mark.asyncio
async def test_apply_coupon_requires_combo(coupon_api):
    coupon_api["booking"] = Booking(id=1, total_amount=10000)
    with pytest.raises(CouponRejected):
        await svc.apply_coupon(object(), 1, "SUMMER10", SESSION)

@pytest.mark.asyncio
async def test_remove_coupon_uses_attached_then_notes(coupon_api):
    coupon_api["booking"] = Booking(id=1, total_amount=10000, combo_id=12, applied_coupon_code="NOTES10")
    await svc.remove_coupon(object(), 1, SESSION)
    assert coupon_api["removed"] == [(1, "NOTES10")]

    coupon_api["booking"] = Booking(id=1, total_amount=10000, combo_id=12)
    with pytest.raises(CouponRejected):
        await svc.remove_coupon(object(), 1, SESSION)

def test_can_pay():
    booking = Booking(id=1, status="pending")
    assert svc.can_pay(booking, None)
    assert not svc.can_pay(booking, PaymentStatus(status="paid"))
    assert not svc.can_pay(Booking(id=1, status="Cancelled"), None)
