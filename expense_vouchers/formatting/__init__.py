"""Arabic numeral, currency and amount-in-words formatting."""

from expense_vouchers.formatting.numerals import (
    DEFAULT_CURRENCY_SYMBOL,
    EASTERN_ARABIC_DIGITS,
    FRACTION_SEPARATOR,
    THOUSANDS_SEPARATOR,
    format_localized_currency,
    format_localized_date,
    format_localized_number,
    from_minor_units,
    number_to_words,
    to_decimal,
    to_minor_units,
)

__all__ = [
    "DEFAULT_CURRENCY_SYMBOL",
    "EASTERN_ARABIC_DIGITS",
    "FRACTION_SEPARATOR",
    "THOUSANDS_SEPARATOR",
    "format_localized_currency",
    "format_localized_date",
    "format_localized_number",
    "from_minor_units",
    "number_to_words",
    "to_decimal",
    "to_minor_units",
]
