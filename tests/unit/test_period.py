"""
Tests for calendar month periods and campaign period validation.
"""

import pytest

from campaign_kernel.domain.dtos import PeriodFilter
from campaign_kernel.domain.period import Period, validate_campaign_period
from campaign_kernel.exceptions import InvalidPeriodError, PeriodError


class TestPeriod:

    def test_orders_chronologically(self):
        assert Period(2024, 12) < Period(2025, 1) < Period(2025, 2)

    def test_str_is_zero_padded(self):
        assert str(Period(2025, 3)) == "2025-03"

    @pytest.mark.parametrize("month", [0, 13, -1])
    def test_month_out_of_range(self, month):
        with pytest.raises(InvalidPeriodError):
            Period(2025, month)

    def test_non_integer_month_rejected(self):
        with pytest.raises(InvalidPeriodError):
            Period(2025, "3")


class TestValidateCampaignPeriod:

    def test_open_ended(self):
        start, end = validate_campaign_period(2025, 1, None, None)
        assert start == Period(2025, 1)
        assert end is None

    def test_same_month_is_valid(self):
        start, end = validate_campaign_period(2025, 5, 2025, 5)
        assert start == end

    def test_end_before_start(self):
        with pytest.raises(InvalidPeriodError) as exc_info:
            validate_campaign_period(2025, 6, 2025, 5)
        assert exc_info.value.code == "INVALID_PERIOD"
        assert isinstance(exc_info.value, PeriodError)

    def test_end_year_before_start_year(self):
        with pytest.raises(InvalidPeriodError):
            validate_campaign_period(2025, 1, 2024, 12)

    def test_half_an_end_period(self):
        with pytest.raises(InvalidPeriodError):
            validate_campaign_period(2025, 1, 2025, None)


class TestPeriodFilter:

    def test_month_requires_year(self):
        with pytest.raises(InvalidPeriodError):
            PeriodFilter(month=3)

    def test_invalid_month(self):
        with pytest.raises(InvalidPeriodError):
            PeriodFilter(year=2025, month=13)
