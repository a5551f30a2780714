"""UtilityReading ORM model for water and electricity meter readings."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, ForeignKey, Index, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class WhoPays(str, Enum):
    """Party billed for a reading or a service."""

    OWNER = "owner"
    RENTER = "renter"
    COMPANY = "company"


class UtilityReading(Base, BaseModel):
    """Model representing one meter reading window for an apartment.

    Any bound may be missing while a reading is still open. Consumption is
    end minus start and only counts when both bounds exist and end >= start.
    """

    __tablename__ = "utility_readings"

    apartment_id: Mapped[int] = mapped_column(
        ForeignKey("apartments.id"),
        nullable=False,
        index=True,
    )

    water_start_reading: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    water_end_reading: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    electricity_start_reading: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    electricity_end_reading: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)

    start_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        default=date.today,
    )
    end_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        default=date.today,
    )

    who_pays: Mapped[WhoPays] = mapped_column(
        nullable=False,
        default=WhoPays.OWNER,
        comment="owner, renter or company",
    )

    apartment: Mapped["Apartment"] = relationship("Apartment")  # noqa: F821

    __table_args__ = (Index("idx_utility_apartment_who_pays", "apartment_id", "who_pays"),)

    def __repr__(self) -> str:
        return (
            f"<UtilityReading(id={self.id}, apartment_id={self.apartment_id}, "
            f"water={self.water_start_reading}->{self.water_end_reading}, "
            f"electricity={self.electricity_start_reading}->{self.electricity_end_reading}, "
            f"who_pays={self.who_pays})>"
        )


__all__ = ["UtilityReading", "WhoPays"]
