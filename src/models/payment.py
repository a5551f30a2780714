"""Payment ORM model for money received against an apartment."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class Currency(str, Enum):
    """Currencies the business bills and collects in."""

    EGP = "EGP"
    """Egyptian pound (also the currency of all utility pricing)"""

    GBP = "GBP"
    """Pound sterling"""


class PayerType(str, Enum):
    """Who handed over the money."""

    OWNER = "owner"
    RENTER = "renter"


class Payment(Base, BaseModel):
    """Model representing a payment received for an apartment.

    The currency column is a plain string: legacy rows may hold codes other
    than EGP/GBP, which the ledger simply does not count.
    """

    __tablename__ = "payments"

    apartment_id: Mapped[int] = mapped_column(
        ForeignKey("apartments.id"),
        nullable=False,
        index=True,
        comment="Apartment the payment is booked against",
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        comment="Payment amount",
    )
    currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        default=Currency.EGP.value,
        comment="ISO currency code (EGP or GBP)",
    )
    user_type: Mapped[PayerType] = mapped_column(
        nullable=False,
        default=PayerType.OWNER,
    )
    payment_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        default=date.today,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    apartment: Mapped["Apartment"] = relationship("Apartment")  # noqa: F821

    __table_args__ = (
        Index("idx_payment_apartment_currency", "apartment_id", "currency"),
        CheckConstraint("amount >= 0", name="ck_payment_amount_non_negative"),
    )

    def __repr__(self) -> str:
        return (
            f"<Payment(id={self.id}, apartment_id={self.apartment_id}, "
            f"amount={self.amount}, currency={self.currency!r})>"
        )


__all__ = ["Payment", "PayerType", "Currency"]
