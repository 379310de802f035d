from decimal import Decimal, InvalidOperation, ROUND_HALF_UP


def to_decimal(value, default: str = "0") -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return Decimal(default)


def format_amount(value, places: int = 0) -> str:
    """Render a number with a fixed count of decimals, rounding half away from zero."""
    exponent = Decimal(1).scaleb(-places)
    return str(to_decimal(value).quantize(exponent, rounding=ROUND_HALF_UP))


def format_money(currency: str, value, places: int = 0) -> str:
    return f"{currency}{format_amount(value, places)}"


def plural(count: int, singular: str, many: str) -> str:
    return many if count > 1 else singular
