"""Integration tests for the ledger aggregation against a real database."""

from decimal import Decimal

import pytest

from src.models.apartment import Apartment
from src.models.payment import Currency
from src.models.utility_reading import WhoPays
from src.models.village import Village
from src.services.errors import ApartmentNotFoundError
from src.services.ledger_service import CurrencyAmounts, LedgerService


class TestFinancialSummary:
    """End-to-end financial summary calculation."""

    async def test_apartment_without_activity_is_all_zero(self, async_db_session, apartment):
        summary = await LedgerService(async_db_session).compute_financial_summary(apartment.id)

        assert summary.apartment_id == apartment.id
        assert summary.total_money_spent == CurrencyAmounts()
        assert summary.total_money_requested == CurrencyAmounts()
        assert summary.net_money == CurrencyAmounts()

    async def test_worked_example(
        self, async_db_session, apartment, add_payment, add_service_request, add_reading
    ):
        """100 EGP + 50 GBP paid, 30 EGP service, water 0->10 at 2 EGP, bad electricity."""
        await add_payment(apartment.id, "100", "EGP")
        await add_payment(apartment.id, "50", "GBP")
        await add_service_request(apartment.id, "30", Currency.EGP)
        await add_reading(apartment.id, water=(0, 10), electricity=(50, 40))

        summary = await LedgerService(async_db_session).compute_financial_summary(apartment.id)

        assert summary.total_money_spent == CurrencyAmounts(EGP=Decimal("100"), GBP=Decimal("50"))
        assert summary.total_money_requested == CurrencyAmounts(
            EGP=Decimal("50"), GBP=Decimal("0")
        )
        assert summary.net_money == CurrencyAmounts(EGP=Decimal("-50"), GBP=Decimal("-50"))

    async def test_missing_apartment_raises_not_found(self, async_db_session, apartment):
        with pytest.raises(ApartmentNotFoundError):
            await LedgerService(async_db_session).compute_financial_summary(apartment.id + 1000)

    async def test_multiple_sources_do_not_multiply(
        self, async_db_session, apartment, add_payment, add_service_request, add_reading
    ):
        """Several rows in every table must each be counted exactly once."""
        for amount in ("10", "20", "30"):
            await add_payment(apartment.id, amount, "EGP")
        for cost in ("5", "7"):
            await add_service_request(apartment.id, cost, Currency.EGP)
        await add_reading(apartment.id, water=(0, 1))
        await add_reading(apartment.id, water=(1, 3))
        await add_reading(apartment.id, electricity=(0, 2))

        summary = await LedgerService(async_db_session).compute_financial_summary(apartment.id)

        assert summary.total_money_spent.EGP == Decimal("60")
        # 12 in requests + water (1 + 2) * 2 + electricity 2 * 3
        assert summary.total_money_requested.EGP == Decimal("24")
        assert summary.net_money.EGP == Decimal("-36")

    async def test_other_apartments_are_not_counted(
        self, async_db_session, apartment, village, owner, add_payment
    ):
        other = Apartment(name="B-202", village_id=village.id, phase=2, owner_id=owner.id)
        async_db_session.add(other)
        await async_db_session.commit()
        await add_payment(other.id, "999", "EGP")
        await add_payment(apartment.id, "1", "EGP")

        summary = await LedgerService(async_db_session).compute_financial_summary(apartment.id)

        assert summary.total_money_spent.EGP == Decimal("1")

    async def test_payments_in_unknown_currency_are_ignored(
        self, async_db_session, apartment, add_payment
    ):
        await add_payment(apartment.id, "40", "USD")
        await add_payment(apartment.id, "15", "GBP")

        summary = await LedgerService(async_db_session).compute_financial_summary(apartment.id)

        assert summary.total_money_spent == CurrencyAmounts(GBP=Decimal("15"))

    async def test_service_request_currencies_are_separate(
        self, async_db_session, apartment, add_service_request
    ):
        await add_service_request(apartment.id, "12", Currency.GBP)
        await add_service_request(apartment.id, "8", Currency.EGP)

        summary = await LedgerService(async_db_session).compute_financial_summary(apartment.id)

        assert summary.total_money_requested == CurrencyAmounts(
            EGP=Decimal("8"), GBP=Decimal("12")
        )
        assert summary.net_money == summary.total_money_requested


class TestUtilityReadingRules:
    """Which readings contribute to utility cost."""

    async def _requested_egp(self, session, apartment_id) -> Decimal:
        summary = await LedgerService(session).compute_financial_summary(apartment_id)
        return summary.total_money_requested.EGP

    @pytest.mark.parametrize("who_pays", [WhoPays.RENTER, WhoPays.COMPANY])
    async def test_non_owner_readings_contribute_zero(
        self, async_db_session, apartment, add_reading, who_pays
    ):
        await add_reading(apartment.id, water=(0, 100), electricity=(0, 100), who_pays=who_pays)

        assert await self._requested_egp(async_db_session, apartment.id) == Decimal("0")

    @pytest.mark.parametrize(
        "water",
        [(None, 10), (0, None), (None, None), (10, 5)],
    )
    async def test_invalid_water_readings_contribute_zero(
        self, async_db_session, apartment, add_reading, water
    ):
        await add_reading(apartment.id, water=water)

        assert await self._requested_egp(async_db_session, apartment.id) == Decimal("0")

    @pytest.mark.parametrize(
        "electricity",
        [(None, 10), (0, None), (None, None), (10, 5)],
    )
    async def test_invalid_electricity_readings_contribute_zero(
        self, async_db_session, apartment, add_reading, electricity
    ):
        await add_reading(apartment.id, electricity=electricity)

        assert await self._requested_egp(async_db_session, apartment.id) == Decimal("0")

    async def test_invalid_electricity_keeps_valid_water(
        self, async_db_session, apartment, add_reading
    ):
        await add_reading(apartment.id, water=(0, 4), electricity=(20, 5))

        # 4 water units * 2 EGP; electricity end < start adds nothing
        assert await self._requested_egp(async_db_session, apartment.id) == Decimal("8")

    async def test_invalid_reading_does_not_cancel_valid_one(
        self, async_db_session, apartment, add_reading
    ):
        await add_reading(apartment.id, water=(0, 5))
        await add_reading(apartment.id, water=(100, 0))

        # Only the valid reading counts: 5 units * 2 EGP
        assert await self._requested_egp(async_db_session, apartment.id) == Decimal("10")

    async def test_zero_consumption_costs_nothing(self, async_db_session, apartment, add_reading):
        await add_reading(apartment.id, water=(7, 7), electricity=(3, 3))

        assert await self._requested_egp(async_db_session, apartment.id) == Decimal("0")

    async def test_zero_price_contributes_zero(
        self, async_db_session, owner, add_reading
    ):
        free_village = Village(
            name="Free Water", water_price=Decimal("0"), electricity_price=Decimal("1"), phases=1
        )
        async_db_session.add(free_village)
        await async_db_session.commit()
        apt = Apartment(name="F-1", village_id=free_village.id, phase=1, owner_id=owner.id)
        async_db_session.add(apt)
        await async_db_session.commit()

        await add_reading(apt.id, water=(0, 50), electricity=(0, 4))

        assert await self._requested_egp(async_db_session, apt.id) == Decimal("4")

    async def test_utility_cost_never_reaches_gbp(self, async_db_session, apartment, add_reading):
        await add_reading(apartment.id, water=(0, 10), electricity=(0, 10))

        summary = await LedgerService(async_db_session).compute_financial_summary(apartment.id)

        assert summary.total_money_requested == CurrencyAmounts(EGP=Decimal("50"))


class TestBatchBalances:
    """Batch balances must agree with single-apartment summaries."""

    async def _make_apartments(self, session, village, owner, count: int) -> list[Apartment]:
        apartments = [
            Apartment(name=f"C-{i}", village_id=village.id, phase=1, owner_id=owner.id)
            for i in range(count)
        ]
        session.add_all(apartments)
        await session.commit()
        return apartments

    async def test_batch_matches_single(
        self,
        async_db_session,
        village,
        owner,
        add_payment,
        add_service_request,
        add_reading,
    ):
        apartments = await self._make_apartments(async_db_session, village, owner, 4)
        a, b, c, _ = apartments
        await add_payment(a.id, "100", "EGP")
        await add_payment(a.id, "50", "GBP")
        await add_service_request(a.id, "30", Currency.EGP)
        await add_reading(a.id, water=(0, 10), electricity=(9, 1))
        await add_service_request(b.id, "75.50", Currency.GBP)
        await add_reading(b.id, electricity=(10, 20), who_pays=WhoPays.RENTER)
        await add_payment(c.id, "12.25", "EGP")
        await add_reading(c.id, water=(2, 4.5))

        service = LedgerService(async_db_session)
        balances = await service.batch_compute_balances([apt.id for apt in apartments])

        assert set(balances) == {apt.id for apt in apartments}
        for apt in apartments:
            summary = await service.compute_financial_summary(apt.id)
            assert balances[apt.id] == summary.net_money

        assert balances[a.id] == CurrencyAmounts(EGP=Decimal("-50"), GBP=Decimal("-50"))
        assert balances[b.id] == CurrencyAmounts(GBP=Decimal("75.50"))
        assert balances[c.id] == CurrencyAmounts(EGP=Decimal("-7.25"))

    async def test_batch_omits_unknown_and_collapses_duplicates(
        self, async_db_session, apartment, add_payment
    ):
        await add_payment(apartment.id, "5", "EGP")

        balances = await LedgerService(async_db_session).batch_compute_balances(
            [apartment.id, apartment.id, 987654]
        )

        assert balances == {apartment.id: CurrencyAmounts(EGP=Decimal("-5"))}

    async def test_empty_batch(self, async_db_session):
        assert await LedgerService(async_db_session).batch_compute_balances([]) == {}
