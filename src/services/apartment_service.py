"""Apartment read paths built on the ledger: statistics and balance-annotated export."""

import logging
from dataclasses import dataclass
from typing import Any, NamedTuple

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.apartment import Apartment
from src.models.payment import Payment
from src.models.service_request import ServiceRequest
from src.models.user import User
from src.models.utility_reading import UtilityReading
from src.models.village import Village
from src.services.config import settings
from src.services.errors import ExportLimitExceededError
from src.services.ledger_service import CurrencyAmounts, FinancialSummary, LedgerService

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"

SORT_COLUMNS = {
    "name": Apartment.name,
    "phase": Apartment.phase,
    "purchase_date": Apartment.purchase_date,
    "owner_name": User.name,
    "village_name": Village.name,
    "created_at": Apartment.created_at,
}


@dataclass
class ApartmentFilters:
    """Filters for apartment listings and exports."""

    village_id: int | None = None
    village_ids: list[int] | None = None
    """Villages the caller may see (admin scoping); None or empty = no restriction"""

    phase: int | None = None
    owner_id: int | None = None
    search: str | None = None
    """Case-insensitive match on apartment name or owner name"""

    sort_by: str = "name"
    sort_order: str = "asc"


class ApartmentStats(NamedTuple):
    """Record counts and ledger of one apartment."""

    payments: int
    service_requests: int
    utility_readings: int
    financial_summary: FinancialSummary

    def as_dict(self) -> dict[str, Any]:
        return {
            "payments": self.payments,
            "service_requests": self.service_requests,
            "utility_readings": self.utility_readings,
            "financial_summary": self.financial_summary.as_dict(),
        }


class ApartmentExport(NamedTuple):
    """Export result: total matching apartments and the annotated rows."""

    total: int
    rows: list[dict[str, Any]]


def _apply_filters(stmt: Select, filters: ApartmentFilters) -> Select:
    if filters.village_ids:
        stmt = stmt.where(Apartment.village_id.in_(filters.village_ids))
    if filters.village_id:
        stmt = stmt.where(Apartment.village_id == filters.village_id)
    if filters.phase:
        stmt = stmt.where(Apartment.phase == filters.phase)
    if filters.owner_id:
        stmt = stmt.where(Apartment.owner_id == filters.owner_id)
    if filters.search and filters.search.strip():
        term = f"%{filters.search.strip()}%"
        stmt = stmt.where(or_(Apartment.name.ilike(term), User.name.ilike(term)))
    return stmt


def _apply_sorting(stmt: Select, sort_by: str, sort_order: str) -> Select:
    column = SORT_COLUMNS.get(sort_by, Apartment.name)
    ordered = column.desc() if sort_order == "desc" else column.asc()
    return stmt.order_by(ordered, Apartment.id.asc())


def _joined(stmt: Select) -> Select:
    return (
        stmt.select_from(Apartment)
        .outerjoin(Village, Apartment.village_id == Village.id)
        .outerjoin(User, Apartment.owner_id == User.id)
    )


class ApartmentService:
    """Apartment statistics and export backed by the ledger service."""

    def __init__(self, session: AsyncSession, export_row_limit: int | None = None):
        self.session = session
        self.ledger = LedgerService(session)
        self.export_row_limit = (
            export_row_limit if export_row_limit is not None else settings.export_row_limit
        )

    async def _count(self, model, apartment_id: int) -> int:
        stmt = select(func.count(model.id)).where(model.apartment_id == apartment_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def get_apartment_stats(self, apartment_id: int) -> ApartmentStats:
        """Get record counts and the financial summary for an apartment.

        Raises:
            InvalidApartmentIdError: apartment_id is not a positive integer
            ApartmentNotFoundError: no apartment with that id
        """
        financial_summary = await self.ledger.compute_financial_summary(apartment_id)

        return ApartmentStats(
            payments=await self._count(Payment, apartment_id),
            service_requests=await self._count(ServiceRequest, apartment_id),
            utility_readings=await self._count(UtilityReading, apartment_id),
            financial_summary=financial_summary,
        )

    async def export_apartments(self, filters: ApartmentFilters) -> ApartmentExport:
        """Export all apartments matching filters, annotated with net balances.

        The row cap is checked against the count before any row is loaded.

        Raises:
            ExportLimitExceededError: more matching apartments than export_row_limit
        """
        count_stmt = _apply_filters(_joined(select(func.count(Apartment.id))), filters)
        total = int((await self.session.execute(count_stmt)).scalar_one())

        if total > self.export_row_limit:
            logger.warning(
                "Export refused: %d apartments match, limit is %d", total, self.export_row_limit
            )
            raise ExportLimitExceededError(self.export_row_limit, total)

        data_stmt = _joined(
            select(
                Apartment.id,
                Apartment.name,
                Apartment.phase,
                Village.name.label("village_name"),
                User.name.label("owner_name"),
            )
        )
        data_stmt = _apply_sorting(
            _apply_filters(data_stmt, filters), filters.sort_by, filters.sort_order
        )
        records = (await self.session.execute(data_stmt)).all()

        balances = await self.ledger.batch_compute_balances(r.id for r in records)

        rows = []
        for record in records:
            balance = balances.get(record.id, CurrencyAmounts())
            rows.append(
                {
                    "id": record.id,
                    "name": record.name,
                    "village": record.village_name or UNKNOWN,
                    "phase": record.phase,
                    "owner": record.owner_name or UNKNOWN,
                    "balance_EGP": balance.EGP,
                    "balance_GBP": balance.GBP,
                }
            )

        logger.info("Exported %d apartment(s)", len(rows))
        return ApartmentExport(total=total, rows=rows)


__all__ = [
    "ApartmentExport",
    "ApartmentFilters",
    "ApartmentService",
    "ApartmentStats",
]
