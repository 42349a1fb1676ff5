def round_cents(amount: float) -> float:
    """Round a currency amount to cents."""
    return round(amount, 2)


def format_currency(amount: float | None, parenthesize_negative: bool = False) -> str:
    """Format a USD amount for display, e.g. '$1,234.50'.

    ``None`` and zero render as '$0.00'. Negative amounts render as
    '-$12.50', or '($12.50)' when ``parenthesize_negative`` is set.
    """
    value = round_cents(amount or 0.0)
    if value == 0:
        return "$0.00"
    formatted = f"${abs(value):,.2f}"
    if value < 0:
        return f"({formatted})" if parenthesize_negative else f"-{formatted}"
    return formatted


def format_percent(value: float) -> str:
    """Format a split percentage, e.g. 70.0 -> '70%'."""
    return f"{value:.0f}%"
