"""Apartment ledger API endpoints."""

import logging
import time
from typing import Any, Literal

from fastapi import APIRouter, Depends, Path, Query
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from src.services import get_async_session
from src.services.apartment_service import ApartmentFilters, ApartmentService
from src.services.errors import AppError
from src.services.ledger_service import CurrencyAmounts, FinancialSummary, LedgerService

logger = logging.getLogger(__name__)


def _log_debug(endpoint: str, start_time: float, **kwargs: Any) -> None:
    """Log API request with timing at DEBUG level."""
    duration_ms = int((time.time() - start_time) * 1000)
    extra = " ".join(f"{k}={v}" for k, v in kwargs.items())
    logger.debug(
        "apartments.%s: %sduration_ms=%d",
        endpoint,
        f"{extra} " if extra else "",
        duration_ms,
    )


def _server_error(message: str) -> AppError:
    return AppError(message, "internal_error", 500)


router = APIRouter(prefix="/api/apartments", tags=["apartments"])


# Response schemas
class CurrencyAmountsResponse(BaseModel):
    """Amounts per currency."""

    EGP: float
    GBP: float

    @classmethod
    def from_amounts(cls, amounts: CurrencyAmounts) -> "CurrencyAmountsResponse":
        return cls(EGP=float(amounts.EGP), GBP=float(amounts.GBP))


class FinancialSummaryResponse(BaseModel):
    """Ledger of one apartment."""

    apartment_id: int
    total_money_spent: CurrencyAmountsResponse
    total_money_requested: CurrencyAmountsResponse
    net_money: CurrencyAmountsResponse  # positive = owner owes, negative = credit

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_summary(cls, summary: FinancialSummary) -> "FinancialSummaryResponse":
        return cls(
            apartment_id=summary.apartment_id,
            total_money_spent=CurrencyAmountsResponse.from_amounts(summary.total_money_spent),
            total_money_requested=CurrencyAmountsResponse.from_amounts(
                summary.total_money_requested
            ),
            net_money=CurrencyAmountsResponse.from_amounts(summary.net_money),
        )


class ApartmentStatsResponse(BaseModel):
    """Record counts and ledger of one apartment."""

    payments: int
    service_requests: int
    utility_readings: int
    financial_summary: FinancialSummaryResponse


class ExportRowResponse(BaseModel):
    """One exported apartment with its net balances."""

    id: int
    name: str
    village: str
    phase: int
    owner: str
    balance_EGP: float
    balance_GBP: float


class ExportResponse(BaseModel):
    total: int
    rows: list[ExportRowResponse]


class FinancialSummaryEnvelope(BaseModel):
    success: bool = True
    data: FinancialSummaryResponse
    message: str


class ApartmentStatsEnvelope(BaseModel):
    success: bool = True
    data: ApartmentStatsResponse
    message: str


class ExportEnvelope(BaseModel):
    success: bool = True
    data: ExportResponse
    message: str


@router.get("/export", response_model=ExportEnvelope)
async def export_apartments(
    village_id: int | None = Query(None, gt=0),  # noqa: B008
    village_ids: list[int] | None = Query(None),  # noqa: B008
    phase: int | None = Query(None, gt=0),  # noqa: B008
    owner_id: int | None = Query(None, gt=0),  # noqa: B008
    search: str | None = Query(None, max_length=255),  # noqa: B008
    sort_by: str = Query("name"),  # noqa: B008
    sort_order: Literal["asc", "desc"] = Query("asc"),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> ExportEnvelope:
    """Export apartments matching the filters, each annotated with its net balance.

    Raises:
        400: Export row limit exceeded
        500: Server error
    """
    start_time = time.time()
    filters = ApartmentFilters(
        village_id=village_id,
        village_ids=village_ids,
        phase=phase,
        owner_id=owner_id,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    try:
        export = await ApartmentService(session).export_apartments(filters)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error in /api/apartments/export: {e}", exc_info=True)
        raise _server_error("Failed to export apartments") from e

    _log_debug("export", start_time, total=export.total)
    return ExportEnvelope(
        data=ExportResponse(
            total=export.total,
            rows=[
                ExportRowResponse(
                    **{
                        **row,
                        "balance_EGP": float(row["balance_EGP"]),
                        "balance_GBP": float(row["balance_GBP"]),
                    }
                )
                for row in export.rows
            ],
        ),
        message=f"Exported {len(export.rows)} apartments",
    )


@router.get("/{apartment_id}/financial-summary", response_model=FinancialSummaryEnvelope)
async def get_financial_summary(
    apartment_id: int = Path(..., gt=0),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> FinancialSummaryEnvelope:
    """Get money spent, money requested and net balance for an apartment.

    Raises:
        404: Apartment not found
        422: apartment_id is not a positive integer
        500: Server error
    """
    start_time = time.time()
    try:
        summary = await LedgerService(session).compute_financial_summary(apartment_id)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error in /api/apartments/{apartment_id}/financial-summary: {e}", exc_info=True)
        raise _server_error("Failed to fetch financial summary") from e

    _log_debug("financial_summary", start_time, apartment_id=apartment_id)
    return FinancialSummaryEnvelope(
        data=FinancialSummaryResponse.from_summary(summary),
        message="Financial summary retrieved successfully",
    )


@router.get("/{apartment_id}/stats", response_model=ApartmentStatsEnvelope)
async def get_apartment_stats(
    apartment_id: int = Path(..., gt=0),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> ApartmentStatsEnvelope:
    """Get record counts and the financial summary for an apartment.

    Raises:
        404: Apartment not found
        500: Server error
    """
    start_time = time.time()
    try:
        stats = await ApartmentService(session).get_apartment_stats(apartment_id)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error in /api/apartments/{apartment_id}/stats: {e}", exc_info=True)
        raise _server_error("Failed to fetch apartment statistics") from e

    _log_debug("stats", start_time, apartment_id=apartment_id)
    return ApartmentStatsEnvelope(
        data=ApartmentStatsResponse(
            payments=stats.payments,
            service_requests=stats.service_requests,
            utility_readings=stats.utility_readings,
            financial_summary=FinancialSummaryResponse.from_summary(stats.financial_summary),
        ),
        message="Apartment statistics retrieved successfully",
    )
