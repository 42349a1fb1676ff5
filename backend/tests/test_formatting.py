import pytest

from fleet_portal.utils.currency import format_currency, format_percent
from fleet_portal.utils.date_helpers import format_year_month, get_month_name, parse_year_month


@pytest.mark.parametrize(
    ("amount", "expected"),
    [(0, "$0.00"), (None, "$0.00"), (1234.5, "$1,234.50"), (-12.5, "-$12.50"), (0.004, "$0.00")],
)
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected


def test_negative_parenthesized():
    assert format_currency(-12.5, parenthesize_negative=True) == "($12.50)"


def test_format_percent():
    assert format_percent(70.0) == "70%"


def test_year_month_helpers():
    assert parse_year_month("2025-03") == (2025, 3)
    assert format_year_month("2025-03") == "March 2025"
    assert get_month_name(12) == "Dec"
    with pytest.raises(ValueError):
        parse_year_month("2025-13")
    with pytest.raises(ValueError):
        parse_year_month("March")
