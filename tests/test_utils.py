"""Tests for utils.py: rule tokens, year parsing, and date helpers."""
from __future__ import annotations

from datetime import date

import pytest

from agents.evidence_finder.utils import (
    iso_date_years_ago,
    normalize_rule_token,
    parse_year_from_date,
    parse_year_from_text,
    reference_date,
)


@pytest.mark.parametrize("rule, token", [
    ("FRE 403", "403"),
    ("FRE 404(b)", "404"),
    ("FRE 401", "401"),
    ("FRE 402", "402"),
    ("FRE 702", "702"),
    ("FRE 801–807", "801"),
    ("FRE 807", "801"),
    ("Hearsay", "801"),
    ("FRE 901", "FRE 901"),
])
def test_normalize_rule_token(rule, token):
    assert normalize_rule_token(rule) == token


class TestYearParsing:
    def test_from_iso_date(self):
        assert parse_year_from_date("2018-03-15") == 2018

    @pytest.mark.parametrize("value", [None, "", "unknown"])
    def test_from_bad_date(self, value):
        assert parse_year_from_date(value) is None

    def test_from_text_takes_first_year_token(self):
        assert parse_year_from_text("United States v. X (2018), aff'd 2020") == 2018

    def test_from_text_ignores_non_year_numbers(self):
        assert parse_year_from_text("123 F.3d 1456, 9th Cir.") is None
        assert parse_year_from_text(None) is None


class TestIsoDateYearsAgo:
    def test_subtracts_years(self):
        assert iso_date_years_ago(10, today=date(2026, 1, 28)) == "2016-01-28"

    def test_leap_day_clamps_to_feb_28(self):
        assert iso_date_years_ago(1, today=date(2024, 2, 29)) == "2023-02-28"


class TestReferenceDate:
    def test_defaults_to_today(self):
        assert reference_date() == date.today()
        assert reference_date(date.today().year) == date.today()

    def test_moves_today_into_given_year(self):
        ref = reference_date(2000)
        assert ref.year == 2000
        assert ref.month == date.today().month
