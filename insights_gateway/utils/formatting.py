"""Human-readable number formatting for insight text"""


def format_currency(amount: float) -> str:
    """Whole-dollar USD amount, e.g. 1234.56 -> "$1,235" and -50 -> "-$50" """
    # Half away from zero; round() would send 0.5 to the even neighbour
    whole = int(abs(amount) + 0.5)
    sign = "-" if amount < 0 and whole else ""
    return f"{sign}${whole:,}"


def format_percent(value: float) -> str:
    return f"{value:.0f}%"
