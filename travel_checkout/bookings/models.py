# module travel_checkout.bookings.models
"""
Modèles canoniques du checkout (pydantic).
Le backend renvoie des champs en PascalCase ou camelCase: la conversion se fait
une seule fois dans bookings.normalize; tout le reste du code lit ces modèles.
"""
from typing import List, Optional
from pydantic import BaseModel, Field

PAID_STATUSES = ("paid", "completed")
SETTLED_BOOKING_STATUSES = ("paid", "confirmed", "completed", "success")
LOCKED_BOOKING_STATUSES = ("cancelled", "confirmed", "completed")


class ServiceSelection(BaseModel):
    service_id: int
    quantity: int = Field(gt=0)


class AttachedCoupon(BaseModel):
    code: str
    description: Optional[str] = None


class Booking(BaseModel):
    id: int
    quantity: int = 0
    unit_price: float = 0.0
    total_amount: float = 0.0
    status: str = "pending"
    role: str = ""
    user_id: Optional[int] = None
    combo_id: Optional[int] = None
    combo_name: Optional[str] = None
    # Texte libre du client, sans les marqueurs machine
    customer_note: str = ""
    attached_coupon: Optional[AttachedCoupon] = None
    applied_coupon_code: Optional[str] = None
    additional_service_selections: List[ServiceSelection] = Field(default_factory=list)

    @property
    def status_normalized(self) -> str:
        return (self.status or "").strip().lower()

    @property
    def is_settled(self) -> bool:
        return self.status_normalized in SETTLED_BOOKING_STATUSES


class AdditionalServiceLine(BaseModel):
    id: int
    name: str = ""
    description: Optional[str] = None
    unit_price: float = 0.0
    quantity: int = 1

    @property
    def amount(self) -> float:
        return self.unit_price * self.quantity


class AddOnsResult(BaseModel):
    lines: List[AdditionalServiceLine] = Field(default_factory=list)
    total: float = 0.0


class DiscountResult(BaseModel):
    original_total: float
    discount_amount: float = 0.0
    applied_coupon_code: Optional[str] = None
    source: str = "none"  # relational | notes | partner | none

    @property
    def applied(self) -> bool:
        return self.discount_amount > 0


class ReconciledTotal(BaseModel):
    original_total: float
    discount_amount: float
    add_ons_total: float
    final_payable: float

    @classmethod
    def compose(cls, original_total: float, discount_amount: float, add_ons_total: float) -> "ReconciledTotal":
        return cls(
            original_total=original_total,
            discount_amount=discount_amount,
            add_ons_total=add_ons_total,
            final_payable=original_total - discount_amount + add_ons_total,
        )


class PaymentStatus(BaseModel):
    status: str = "pending"
    amount: float = 0.0
    method: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_paid(self) -> bool:
        return (self.status or "").lower() in PAID_STATUSES


class CheckoutSession(BaseModel):
    """Identité de l'utilisateur courant (fournie par le flux de connexion, hors périmètre)."""
    access_token: str
    user_id: Optional[int] = None
    role: str = ""
