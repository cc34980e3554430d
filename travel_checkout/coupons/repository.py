"""
Accès backend pour la feature 'coupons' (validation, calcul, application, retrait).
Les BackendError sont propagées: c'est le service qui décide du repli.
"""
from travel_checkout.infra.backend_client import BackendClient
from travel_checkout.bookings.normalize import pick_cased, to_bool, to_float

# module travel_checkout.coupons.repository
async def validate_coupon(client: BackendClient, code: str, combo_id: int) -> bool:
    """POST /Coupon/validate -> {IsValid}."""
    res = await client.post("/Coupon/validate", json={"Code": code, "ServiceComboId": int(combo_id)}) or {}
    return to_bool(pick_cased(res, "isValid"))

async def calculate_discount(client: BackendClient, code: str, original_amount: float) -> float:
    """POST /Coupon/calculate-discount {Code, OriginalAmount} -> {Discount}."""
    res = await client.post("/Coupon/calculate-discount", json={"Code": code, "OriginalAmount": original_amount}) or {}
    return to_float(pick_cased(res, "discount"))

async def apply_coupon(client: BackendClient, booking_id: int, code: str) -> None:
    await client.post("/Coupon/apply", json={"BookingId": int(booking_id), "CouponCode": code})

async def remove_coupon(client: BackendClient, booking_id: int, code: str) -> None:
    await client.post("/Coupon/remove", json={"BookingId": int(booking_id), "CouponCode": code})
