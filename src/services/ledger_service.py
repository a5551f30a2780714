"""Apartment ledger aggregation: money paid in, money owed and the net balance.

Ledger formula, per currency:
    spent     = SUM(payments.amount)
    requested = SUM(service_requests.cost) + owner-billed utility cost (EGP only)
    net       = requested - spent   (positive = owner owes, negative = credit)

Utility cost per reading is (end - start) * village price for water and for
electricity, counted only for who_pays = owner readings with both bounds set,
end >= start and a positive price. Anything else contributes 0.

The module is split in two:
- pure functions (parse_amount, summarize, ...) that turn raw aggregate rows
  into a FinancialSummary and can be tested without a database;
- build_ledger_query / fetch_ledger_aggregates, the data access that produces
  those rows in a single round trip for one or many apartments.

Malformed aggregates (unparsable, NaN, infinite, negative) never raise: the
bucket is logged at WARNING and clamped to 0 so callers always get a number.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, NamedTuple, Sequence

from sqlalchemy import Numeric, Select, and_, case, cast, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.apartment import Apartment
from src.models.payment import Currency, Payment
from src.models.service_request import ServiceRequest
from src.models.utility_reading import UtilityReading, WhoPays
from src.models.village import Village
from src.services.errors import ApartmentNotFoundError, InvalidApartmentIdError

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

# Utility readings billed into the apartment ledger
BILLED_UTILITY_PAYER = WhoPays.OWNER


@dataclass(frozen=True)
class CurrencyAmounts:
    """Amounts for the two supported currencies."""

    EGP: Decimal = ZERO
    GBP: Decimal = ZERO

    def get(self, currency: Currency | str) -> Decimal:
        return getattr(self, Currency(currency).value)

    def __add__(self, other: "CurrencyAmounts") -> "CurrencyAmounts":
        return CurrencyAmounts(EGP=self.EGP + other.EGP, GBP=self.GBP + other.GBP)

    def __sub__(self, other: "CurrencyAmounts") -> "CurrencyAmounts":
        return CurrencyAmounts(EGP=self.EGP - other.EGP, GBP=self.GBP - other.GBP)

    def as_dict(self) -> dict[str, Decimal]:
        return {currency.value: self.get(currency) for currency in Currency}


class LedgerAggregates(NamedTuple):
    """Raw per-apartment sums as returned by the store (values may be any type)."""

    apartment_id: int
    payments_egp: Any = 0
    payments_gbp: Any = 0
    requests_egp: Any = 0
    requests_gbp: Any = 0
    water_cost: Any = 0
    electricity_cost: Any = 0


@dataclass(frozen=True)
class FinancialSummary:
    """Ledger of one apartment broken out by currency."""

    apartment_id: int
    total_money_spent: CurrencyAmounts
    total_money_requested: CurrencyAmounts
    net_money: CurrencyAmounts

    def as_dict(self) -> dict[str, Any]:
        return {
            "apartment_id": self.apartment_id,
            "total_money_spent": self.total_money_spent.as_dict(),
            "total_money_requested": self.total_money_requested.as_dict(),
            "net_money": self.net_money.as_dict(),
        }


# ---------------------------------------------------------------------------
# Pure computation
# ---------------------------------------------------------------------------


def parse_amount(value: Any, bucket: str, apartment_id: int | None = None) -> Decimal:
    """Parse one aggregate value into a non-negative finite Decimal.

    Args:
        value: Raw value from the store (Decimal, float, int, str or None)
        bucket: Bucket name used in the warning (e.g. "payments_egp")
        apartment_id: Apartment the value belongs to, for the warning

    Returns:
        The parsed amount, or 0 for None and for invalid values
    """
    if value is None:
        return ZERO

    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        logger.warning(
            "Unparsable %s aggregate for apartment %s: %r, using 0", bucket, apartment_id, value
        )
        return ZERO

    if not amount.is_finite() or amount < 0:
        logger.warning(
            "Invalid %s aggregate for apartment %s: %r, using 0", bucket, apartment_id, value
        )
        return ZERO

    return amount


def parse_currency_totals(
    egp_value: Any, gbp_value: Any, kind: str, apartment_id: int | None = None
) -> CurrencyAmounts:
    """Parse a pair of per-currency sums; each bucket is validated on its own."""
    return CurrencyAmounts(
        EGP=parse_amount(egp_value, f"{kind}_egp", apartment_id),
        GBP=parse_amount(gbp_value, f"{kind}_gbp", apartment_id),
    )


def calculate_utility_cost(
    water_cost: Any, electricity_cost: Any, apartment_id: int | None = None
) -> Decimal:
    """Combine water and electricity sums into the EGP utility cost.

    Invalid readings are already excluded by the query; an invalid total for
    one utility only drops that utility, not the other.
    """
    water = parse_amount(water_cost, "water_cost", apartment_id)
    electricity = parse_amount(electricity_cost, "electricity_cost", apartment_id)
    total = water + electricity

    if total > 0:
        logger.debug(
            "Utility costs for apartment %s: water=%s electricity=%s total=%s",
            apartment_id,
            water,
            electricity,
            total,
        )

    return total


def summarize(aggregates: LedgerAggregates) -> FinancialSummary:
    """Build the financial summary of one apartment from its raw sums."""
    apartment_id = aggregates.apartment_id

    total_money_spent = parse_currency_totals(
        aggregates.payments_egp, aggregates.payments_gbp, "payments", apartment_id
    )
    service_request_totals = parse_currency_totals(
        aggregates.requests_egp, aggregates.requests_gbp, "requests", apartment_id
    )
    utility_cost = calculate_utility_cost(
        aggregates.water_cost, aggregates.electricity_cost, apartment_id
    )

    # Utility pricing is EGP-only
    total_money_requested = service_request_totals + CurrencyAmounts(EGP=utility_cost)

    return FinancialSummary(
        apartment_id=apartment_id,
        total_money_spent=total_money_spent,
        total_money_requested=total_money_requested,
        net_money=total_money_requested - total_money_spent,
    )


def net_balances(rows: Iterable[LedgerAggregates]) -> dict[int, CurrencyAmounts]:
    """Map apartment id to net balance for a batch of raw rows."""
    return {row.apartment_id: summarize(row).net_money for row in rows}


# ---------------------------------------------------------------------------
# Data access
# ---------------------------------------------------------------------------


def _currency_sum(amount_column, apartment_column, currency_column, currency_value):
    """Correlated COALESCE(SUM(amount), 0) for one apartment and currency."""
    return func.coalesce(
        select(func.sum(cast(amount_column, Numeric(14, 2))))
        .where(
            (apartment_column == Apartment.id) & (currency_column == currency_value)
        )
        .correlate(Apartment)
        .scalar_subquery(),
        0,
    )


def _utility_cost(start_column, end_column, price_column):
    """Correlated sum of owner-billed consumption * price; invalid readings add 0."""
    return func.coalesce(
        select(
            func.sum(
                case(
                    (
                        and_(
                            end_column.is_not(None),
                            start_column.is_not(None),
                            end_column >= start_column,
                            price_column > 0,
                        ),
                        (end_column - start_column) * price_column,
                    ),
                    else_=0,
                )
            )
        )
        .where(
            (UtilityReading.apartment_id == Apartment.id)
            & (UtilityReading.who_pays == BILLED_UTILITY_PAYER)
        )
        .correlate(Apartment, Village)
        .scalar_subquery(),
        0,
    )


def build_ledger_query(apartment_ids: Sequence[int]) -> Select:
    """Build the single-pass ledger aggregation for the given apartments.

    Every sum is an independent correlated subquery; joining payments, service
    requests and readings to the apartment directly would multiply rows.
    """
    return (
        select(
            Apartment.id.label("apartment_id"),
            _currency_sum(
                Payment.amount, Payment.apartment_id, Payment.currency, Currency.EGP.value
            ).label("payments_egp"),
            _currency_sum(
                Payment.amount, Payment.apartment_id, Payment.currency, Currency.GBP.value
            ).label("payments_gbp"),
            _currency_sum(
                ServiceRequest.cost,
                ServiceRequest.apartment_id,
                ServiceRequest.currency,
                Currency.EGP,
            ).label("requests_egp"),
            _currency_sum(
                ServiceRequest.cost,
                ServiceRequest.apartment_id,
                ServiceRequest.currency,
                Currency.GBP,
            ).label("requests_gbp"),
            _utility_cost(
                UtilityReading.water_start_reading,
                UtilityReading.water_end_reading,
                Village.water_price,
            ).label("water_cost"),
            _utility_cost(
                UtilityReading.electricity_start_reading,
                UtilityReading.electricity_end_reading,
                Village.electricity_price,
            ).label("electricity_cost"),
        )
        .select_from(Apartment)
        .outerjoin(Village, Apartment.village_id == Village.id)
        .where(Apartment.id.in_(list(apartment_ids)))
    )


async def fetch_ledger_aggregates(
    session: AsyncSession, apartment_ids: Sequence[int]
) -> list[LedgerAggregates]:
    """Run the ledger aggregation; database errors propagate unchanged."""
    stmt = build_ledger_query(apartment_ids)
    try:
        result = await session.execute(stmt)
    except SQLAlchemyError:
        logger.error(
            "Error fetching ledger aggregates for %d apartment(s)",
            len(apartment_ids),
            exc_info=True,
        )
        raise
    return [LedgerAggregates(**row._mapping) for row in result.all()]


class LedgerService:
    """Compute apartment ledgers from the current database state."""

    def __init__(self, session: AsyncSession):
        """Initialize with database session.

        Args:
            session: AsyncSession for database operations
        """
        self.session = session

    async def compute_financial_summary(self, apartment_id: int) -> FinancialSummary:
        """Calculate money spent, money requested and net balance for an apartment.

        Args:
            apartment_id: Apartment ID (positive integer)

        Returns:
            FinancialSummary broken out by currency

        Raises:
            InvalidApartmentIdError: apartment_id is not a positive integer
            ApartmentNotFoundError: no apartment with that id
        """
        if isinstance(apartment_id, bool) or not isinstance(apartment_id, int) or apartment_id <= 0:
            raise InvalidApartmentIdError(apartment_id)

        logger.debug("Calculating financial summary for apartment %d", apartment_id)

        rows = await fetch_ledger_aggregates(self.session, [apartment_id])
        if not rows:
            logger.warning("Apartment %d not found for financial summary", apartment_id)
            raise ApartmentNotFoundError(apartment_id)

        summary = summarize(rows[0])
        logger.info(
            "Financial summary for apartment %d: spent=%s requested=%s net=%s",
            apartment_id,
            summary.total_money_spent.as_dict(),
            summary.total_money_requested.as_dict(),
            summary.net_money.as_dict(),
        )
        return summary

    async def batch_compute_balances(
        self, apartment_ids: Iterable[int]
    ) -> dict[int, CurrencyAmounts]:
        """Calculate net balances for many apartments in one query.

        Args:
            apartment_ids: Apartment IDs; duplicates are ignored

        Returns:
            Dict mapping apartment_id to net balance. Ids with no apartment are
            left out. An empty input returns {} without querying.
        """
        unique_ids = list(dict.fromkeys(apartment_ids))
        if not unique_ids:
            return {}

        rows = await fetch_ledger_aggregates(self.session, unique_ids)
        balances = net_balances(rows)

        logger.debug(
            "Computed balances for %d of %d requested apartment(s)",
            len(balances),
            len(unique_ids),
        )
        return balances


__all__ = [
    "Currency",
    "CurrencyAmounts",
    "FinancialSummary",
    "LedgerAggregates",
    "LedgerService",
    "build_ledger_query",
    "calculate_utility_cost",
    "fetch_ledger_aggregates",
    "net_balances",
    "parse_amount",
    "parse_currency_totals",
    "summarize",
]
