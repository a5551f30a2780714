"""ServiceRequest ORM model for work billed to an apartment."""

from decimal import Decimal

from sqlalchemy import CheckConstraint, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel
from src.models.payment import Currency
from src.models.utility_reading import WhoPays


class ServiceRequest(Base, BaseModel):
    """Model representing a service rendered for an apartment.

    The cost is money owed to the business and always counts towards the
    apartment's ledger in its own currency.
    """

    __tablename__ = "service_requests"

    apartment_id: Mapped[int] = mapped_column(
        ForeignKey("apartments.id"),
        nullable=False,
        index=True,
    )

    service_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="Service",
    )
    cost: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        default=Decimal("0"),
    )
    currency: Mapped[Currency] = mapped_column(
        nullable=False,
        default=Currency.EGP,
    )
    who_pays: Mapped[WhoPays] = mapped_column(
        nullable=False,
        default=WhoPays.OWNER,
    )
    notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    apartment: Mapped["Apartment"] = relationship("Apartment")  # noqa: F821

    __table_args__ = (
        Index("idx_service_request_apartment_currency", "apartment_id", "currency"),
        CheckConstraint("cost >= 0", name="ck_service_request_cost_non_negative"),
    )

    def __repr__(self) -> str:
        return (
            f"<ServiceRequest(id={self.id}, apartment_id={self.apartment_id}, "
            f"cost={self.cost}, currency={self.currency})>"
        )


__all__ = ["ServiceRequest"]
