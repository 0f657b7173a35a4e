from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional
from sqlalchemy.orm import Session

from src.config import settings
from src.models import BookingSettings
from src.bookings.schemas import Seat, FareBreakdown

WHOLE_UNITS = Decimal("1")


def round_amount(amount: Decimal) -> Decimal:
    """Round to whole currency units, halves rounding up"""
    return Decimal(amount).quantize(WHOLE_UNITS, rounding=ROUND_HALF_UP)


def format_currency(amount: Decimal, currency: Optional[str] = None) -> str:
    """Render an amount as the booking pages show it, e.g. KSh 10,220"""
    amount = Decimal(amount)
    if amount == amount.to_integral_value():
        text = f"{int(amount):,}"
    else:
        text = f"{amount:,.2f}"
    return f"{currency or settings.CURRENCY} {text}"


class FareCalculator:
    """Calculates the fare for a set of selected seats"""

    def __init__(
        self,
        booking_fee: Decimal = settings.BOOKING_FEE,
        tax_rate: Decimal = settings.TAX_RATE,
        currency: str = settings.CURRENCY
    ):
        self.booking_fee = Decimal(booking_fee)
        self.tax_rate = Decimal(tax_rate)
        self.currency = currency

    @classmethod
    def from_db(cls, db: Session) -> "FareCalculator":
        """Use the stored booking settings when present, configured defaults otherwise"""
        stored = db.query(BookingSettings).order_by(BookingSettings.id.desc()).first()
        if not stored:
            return cls()
        return cls(booking_fee=stored.booking_fee, tax_rate=stored.tax_rate)

    def calculate(self, seats: Iterable[Seat]) -> FareBreakdown:
        """Subtotal of the selected seats plus booking fee and tax"""
        selected = [seat for seat in seats if seat.is_selected]

        subtotal = sum((Decimal(seat.price) for seat in selected), Decimal("0"))
        tax = round_amount(subtotal * self.tax_rate)
        total = round_amount(subtotal + self.booking_fee + tax)

        return FareBreakdown(
            seat_count=len(selected),
            subtotal=subtotal,
            booking_fee=self.booking_fee,
            tax=tax,
            total=total,
            currency=self.currency,
            formatted_total=format_currency(total, self.currency)
        )
