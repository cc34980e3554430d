"""
Frontière de normalisation: payloads backend (PascalCase/camelCase) -> modèles canoniques.
Exécutée une fois, à la lecture; aucun autre module ne lit de dict brut du backend.
"""
from typing import Any, Dict, Optional

from travel_checkout.bookings.models import (
    AdditionalServiceLine,
    AttachedCoupon,
    Booking,
    PaymentStatus,
)
from travel_checkout.bookings import notes as notes_codec


def pick(raw: Any, *keys: str, default: Any = None) -> Any:
    """Première valeur non nulle parmi les clés (ex: pick(b, "TotalAmount", "totalAmount"))."""
    if not isinstance(raw, dict):
        return default
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return default

def pick_cased(raw: Any, name: str, default: Any = None) -> Any:
    """pick() sur les deux casses d'un même champ: "totalAmount" => TotalAmount | totalAmount."""
    return pick(raw, name[:1].upper() + name[1:], name[:1].lower() + name[1:], default=default)

def to_float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0

def to_int(value: Any) -> int:
    try:
        return int(float(value or 0))
    except (TypeError, ValueError):
        return 0

def to_bool(value: Any) -> bool:
    """Booléen tolérant: "false", "0", "no", "" => False (le backend renvoie parfois des chaînes)."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "y")
    return bool(value)

def _optional_int(value: Any) -> Optional[int]:
    number = to_int(value)
    return number or None


def _role_name(raw: Dict[str, Any]) -> str:
    user = pick_cased(raw, "user") or {}
    role = pick_cased(user, "role")
    if isinstance(role, dict):
        role = pick_cased(role, "name")
    return str(role or "").strip().lower()

def _attached_coupon(raw: Dict[str, Any]) -> Optional[AttachedCoupon]:
    wrappers = pick_cased(raw, "bookingCoupons") or []
    if not isinstance(wrappers, list) or not wrappers:
        return None
    coupon = pick_cased(wrappers[0], "coupon")
    if not isinstance(coupon, dict):
        return None
    code = str(pick_cased(coupon, "code") or "").strip()
    return AttachedCoupon(code=code, description=pick_cased(coupon, "description"))

def normalize_booking(raw: Dict[str, Any], fallback_role: str = "") -> Booking:
    """
    Construit un Booking canonique depuis GET /Booking/{id}.
    - Prix unitaire: ServiceCombo.Price, sinon Service.Price
    - Rôle: User.Role.Name, sinon le rôle de la session (fallback_role)
    - Marqueurs du champ Notes décodés en champs structurés
    """
    combo = pick_cased(raw, "serviceCombo") or {}
    service = pick_cased(raw, "service") or {}
    raw_notes = str(pick_cased(raw, "notes") or "")
    user = pick_cased(raw, "user") or {}
    return Booking(
        id=to_int(pick_cased(raw, "id")),
        quantity=to_int(pick_cased(raw, "quantity")),
        unit_price=to_float(pick_cased(combo, "price") if combo else pick_cased(service, "price")),
        total_amount=to_float(pick_cased(raw, "totalAmount")),
        status=str(pick_cased(raw, "status") or "pending"),
        role=_role_name(raw) or (fallback_role or "").lower(),
        user_id=_optional_int(pick_cased(raw, "userId") or pick_cased(user, "id")),
        combo_id=_optional_int(pick_cased(raw, "serviceComboId") or pick_cased(combo, "id")),
        combo_name=pick_cased(combo, "name"),
        customer_note=notes_codec.strip_markers(raw_notes),
        attached_coupon=_attached_coupon(raw),
        applied_coupon_code=notes_codec.parse_coupon_code(raw_notes),
        additional_service_selections=notes_codec.parse_additional_services(raw_notes),
    )

def normalize_combo_service(detail: Dict[str, Any]) -> Optional[AdditionalServiceLine]:
    """Une ligne de GET /ServiceComboDetail/combo/{id} -> service (quantité posée par l'appelant)."""
    service = pick_cased(detail, "service")
    if not isinstance(service, dict):
        return None
    service_id = to_int(pick_cased(service, "id"))
    if not service_id:
        return None
    return AdditionalServiceLine(
        id=service_id,
        name=str(pick_cased(service, "name") or ""),
        description=pick_cased(service, "description"),
        unit_price=to_float(pick_cased(service, "price")),
    )

def normalize_payment_status(raw: Dict[str, Any]) -> PaymentStatus:
    return PaymentStatus(
        status=str(pick_cased(raw, "status") or "pending").lower(),
        amount=to_float(pick_cased(raw, "amount")),
        method=pick_cased(raw, "paymentMethod"),
        created_at=pick_cased(raw, "createdAt"),
        updated_at=pick_cased(raw, "updatedAt"),
    )
