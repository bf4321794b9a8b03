from __future__ import annotations

import logging

import pandas as pd
import pytest

from conftest import PHEV
from ev_core.filters import (
    FILTER_KEYS,
    FilterCriteria,
    active_filters,
    clear_criteria,
    filter_records,
    matches,
    normalize_criteria,
    update_criteria,
)
from ev_core.records import RECORD_FIELDS, empty_records


def test_empty_criteria_returns_full_input_in_order(sample_records: pd.DataFrame) -> None:
    out = filter_records(sample_records, FilterCriteria())
    pd.testing.assert_frame_equal(out, sample_records)


def test_empty_input_yields_empty_frame() -> None:
    out = filter_records(empty_records(), FilterCriteria(make="TESLA"))
    assert out.empty
    assert list(out.columns) == list(RECORD_FIELDS)


def test_no_match_is_empty_not_error(sample_records: pd.DataFrame) -> None:
    out = filter_records(sample_records, FilterCriteria(make="DELOREAN"))
    assert out.empty
    assert list(out.columns) == list(RECORD_FIELDS)


def test_search_is_case_insensitive_substring(sample_records: pd.DataFrame) -> None:
    assert len(filter_records(sample_records, FilterCriteria(search="seattle"))) == 3
    assert len(filter_records(sample_records, FilterCriteria(search="SEAT"))) == 3
    assert len(filter_records(sample_records, FilterCriteria(search="phev"))) == 4
    assert len(filter_records(sample_records, FilterCriteria(search="model"))) == 4


def test_search_treats_input_literally(sample_records: pd.DataFrame) -> None:
    # Parentheses would be a regex group; the search is a plain substring.
    assert len(filter_records(sample_records, FilterCriteria(search="(BEV)"))) == 7


def test_empty_fields_never_match_search() -> None:
    record = {col: "" for col in RECORD_FIELDS}
    assert not matches(record, FilterCriteria(search="a"))
    assert matches(record, FilterCriteria())


def test_exact_match_is_case_sensitive(sample_records: pd.DataFrame) -> None:
    assert len(filter_records(sample_records, FilterCriteria(make="TESLA"))) == 4
    assert filter_records(sample_records, FilterCriteria(make="tesla")).empty
    assert filter_records(sample_records, FilterCriteria(city="Seat")).empty


def test_year_filter_compares_strings(sample_records: pd.DataFrame) -> None:
    out = filter_records(sample_records, FilterCriteria(year="2017"))
    assert out["Make"].tolist() == ["TESLA", "FORD"]


def test_combined_constraints_and_order(sample_records: pd.DataFrame) -> None:
    out = filter_records(sample_records, FilterCriteria(make="TESLA", state="WA"))
    assert out["VIN (1-10)"].tolist() == ["5YJ3E1EB4L", "5YJYGDEE1M", "7SAYGDEE5P"]
    # Load position is kept in the index.
    assert out.index.tolist() == [1, 3, 11]

    narrowed = filter_records(sample_records, FilterCriteria(make="TESLA", state="WA", city="Seattle"))
    assert narrowed["VIN (1-10)"].tolist() == ["5YJ3E1EB4L"]


def test_ev_type_and_eligibility_filters(sample_records: pd.DataFrame) -> None:
    assert len(filter_records(sample_records, FilterCriteria(ev_type=PHEV))) == 4
    out = filter_records(sample_records, FilterCriteria(cafv_eligibility="Not eligible due to low battery range"))
    assert out["Make"].tolist() == ["FORD", "FORD"]


@pytest.mark.parametrize(
    "criteria",
    [
        FilterCriteria(),
        FilterCriteria(search="king"),
        FilterCriteria(search="2023", make="TESLA"),
        FilterCriteria(state="WA", ev_type=PHEV),
        FilterCriteria(county="King", model="MODEL 3"),
        FilterCriteria(search="zzz"),
    ],
)
def test_vectorized_filter_agrees_with_predicate(sample_records: pd.DataFrame, criteria: FilterCriteria) -> None:
    expected = [idx for idx, rec in sample_records.iterrows() if matches(rec.to_dict(), criteria)]
    assert filter_records(sample_records, criteria).index.tolist() == expected


def test_adding_constraints_never_grows_the_match_set(sample_records: pd.DataFrame) -> None:
    steps = [("state", "WA"), ("county", "King"), ("search", "e"), ("ev_type", "Battery Electric Vehicle (BEV)"), ("make", "TESLA")]
    criteria = FilterCriteria()
    previous = set(filter_records(sample_records, criteria).index)
    for key, value in steps:
        criteria = update_criteria(criteria, key, value)
        current = set(filter_records(sample_records, criteria).index)
        assert current <= previous
        previous = current


def test_normalize_criteria_accepts_aliases_and_drops_unknown_keys() -> None:
    criteria = normalize_criteria({"evType": PHEV, "cafvEligibility": "x", "make": None, "colour": "red", "year": 2021})
    assert criteria == FilterCriteria(ev_type=PHEV, cafv_eligibility="x", year="2021")
    assert normalize_criteria(None) == FilterCriteria()


def test_update_criteria_returns_new_value() -> None:
    original = FilterCriteria(state="WA")
    updated = update_criteria(original, "make", "TESLA")
    assert original == FilterCriteria(state="WA")
    assert updated == FilterCriteria(state="WA", make="TESLA")
    assert update_criteria(updated, "evType", PHEV).ev_type == PHEV


def test_update_with_unknown_key_is_ignored(caplog: pytest.LogCaptureFixture) -> None:
    original = FilterCriteria(state="WA")
    with caplog.at_level(logging.WARNING, logger="ev_core.filters"):
        assert update_criteria(original, "colour", "red") is original
    assert "colour" in caplog.text


def test_clear_and_active_filters() -> None:
    criteria = FilterCriteria(search="x", make="TESLA")
    assert active_filters(criteria) == {"search": "x", "make": "TESLA"}
    assert active_filters(clear_criteria()) == {}
    assert set(FILTER_KEYS) == {"search", "state", "county", "city", "make", "model", "year", "ev_type", "cafv_eligibility"}
