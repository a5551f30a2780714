"""Village ORM model holding utility pricing and phase layout."""

from decimal import Decimal

from sqlalchemy import CheckConstraint, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models import Base, BaseModel


class Village(Base, BaseModel):
    """Model representing a village (compound) of apartments.

    Utility prices carry no currency column: they are always applied in EGP.
    Apartments in the village are numbered into phases 1..phases.
    """

    __tablename__ = "villages"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )

    electricity_price: Mapped[Decimal] = mapped_column(
        Numeric(10, 4),
        nullable=False,
        default=Decimal("0"),
        comment="Price per electricity unit in EGP",
    )
    water_price: Mapped[Decimal] = mapped_column(
        Numeric(10, 4),
        nullable=False,
        default=Decimal("0"),
        comment="Price per water unit in EGP",
    )

    phases: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        comment="Number of construction phases",
    )

    # Relationships
    apartments: Mapped[list["Apartment"]] = relationship(  # noqa: F821
        "Apartment",
        back_populates="village",
    )

    __table_args__ = (
        CheckConstraint("electricity_price >= 0", name="ck_village_electricity_price"),
        CheckConstraint("water_price >= 0", name="ck_village_water_price"),
        CheckConstraint("phases >= 1", name="ck_village_phases"),
    )

    def __repr__(self) -> str:
        return (
            f"<Village(id={self.id}, name={self.name!r}, phases={self.phases}, "
            f"electricity_price={self.electricity_price}, water_price={self.water_price})>"
        )


__all__ = ["Village"]
