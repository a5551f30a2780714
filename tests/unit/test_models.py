"""Unit tests for ORM model definitions."""

import pytest

from src.models.apartment import Apartment
from src.models.payment import Currency
from src.models.utility_reading import UtilityReading, WhoPays
from src.models.village import Village


def _check_names(model) -> set[str]:
    return {c.name for c in model.__table__.constraints if c.name and c.name.startswith("ck_")}


class TestApartmentModel:
    def test_phase_lower_bound_constraint(self):
        assert "ck_apartment_phase" in _check_names(Apartment)

    def test_repr(self):
        apt = Apartment(id=3, name="A-1", village_id=1, owner_id=2, phase=1)

        assert repr(apt) == "<Apartment(id=3, name='A-1', village_id=1, phase=1, owner_id=2)>"


class TestVillageModel:
    def test_price_and_phase_constraints(self):
        assert _check_names(Village) == {
            "ck_village_electricity_price",
            "ck_village_water_price",
            "ck_village_phases",
        }


class TestEnums:
    def test_currency_is_closed(self):
        assert [c.value for c in Currency] == ["EGP", "GBP"]
        with pytest.raises(ValueError):
            Currency("USD")

    def test_who_pays_values(self):
        assert {w.value for w in WhoPays} == {"owner", "renter", "company"}

    def test_readings_are_owner_billed_by_default(self):
        assert UtilityReading.__table__.c.who_pays.default.arg == WhoPays.OWNER
