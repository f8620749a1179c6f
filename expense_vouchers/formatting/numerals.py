"""
Arabic Numeral and Amount Formatting

Every amount shown in the expense list or printed on a voucher goes
through this module:
- format_localized_number: grouped, fixed-decimal, Eastern Arabic digits
- format_localized_currency: the number followed by the currency symbol
- number_to_words: the amount written out in Arabic words

DESIGN DECISION: Nothing here raises. Missing, non-numeric, NaN or
infinite input is read as 0 so a broken record can still be listed and
printed.

The verbalizer is table driven. Irregular Arabic forms (dual thousands,
the hundreds words, 10-12) live in the lookup tables below, not in
branching logic.
"""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any, Optional


THOUSANDS_SEPARATOR = "٬"  # U+066C
FRACTION_SEPARATOR = "٫"   # U+066B
EASTERN_ARABIC_DIGITS = "٠١٢٣٤٥٦٧٨٩"

DEFAULT_CURRENCY_SYMBOL = "ج.م"

_TO_EASTERN = str.maketrans("0123456789", EASTERN_ARABIC_DIGITS)

# Minor units per pound (piastres)
MINOR_UNITS = 100


# =============================================================================
# VERBALIZER TABLES
# =============================================================================

ZERO_WORD = "صفر"
NEGATIVE_WORD = "سالب"
CONJUNCTION = "و"
CURRENCY_UNIT_WORD = "جنيه"
FRACTION_UNIT_WORD = "قرش"
THOUSAND_WORD = "ألف"
TEEN_SUFFIX_WORD = "عشر"

ONES = ["", "واحد", "اثنان", "ثلاثة", "أربعة", "خمسة", "ستة", "سبعة", "ثمانية", "تسعة"]

# 10, 11 and 12 are irregular; 13-19 are ONES[n % 10] + TEEN_SUFFIX_WORD
IRREGULAR_TEENS = {
    10: "عشرة",
    11: "أحد عشر",
    12: "اثنا عشر",
}

TENS = ["", "", "عشرون", "ثلاثون", "أربعون", "خمسون", "ستون", "سبعون", "ثمانون", "تسعون"]

HUNDREDS = [
    "", "مائة", "مائتان", "ثلاثمائة", "أربعمائة",
    "خمسمائة", "ستمائة", "سبعمائة", "ثمانمائة", "تسعمائة",
]

THOUSANDS = [
    "", "ألف", "ألفان", "ثلاثة آلاف", "أربعة آلاف",
    "خمسة آلاف", "ستة آلاف", "سبعة آلاف", "ثمانية آلاف", "تسعة آلاف",
]


# =============================================================================
# COERCION
# =============================================================================

def to_decimal(value: Any) -> Decimal:
    """
    Read any value as a finite Decimal, falling back to 0.

    Floats are converted exactly (no repr round trip) so rounding later
    behaves like JavaScript's toFixed on the same double.
    """
    if value is None or isinstance(value, bool):
        return Decimal(0)
    try:
        if isinstance(value, Decimal):
            result = value
        elif isinstance(value, (int, float)):
            result = Decimal(value)
        elif isinstance(value, str):
            result = Decimal(value.strip().replace(",", ""))
        else:
            result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return Decimal(0)
    if not result.is_finite():
        return Decimal(0)
    return result


def _round_half_up(value: Decimal, decimals: int) -> Decimal:
    quantum = Decimal(1).scaleb(-decimals)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + decimals + 2)
        return value.quantize(quantum, rounding=ROUND_HALF_UP)


def _to_eastern_digits(text: str) -> str:
    return text.translate(_TO_EASTERN)


def _group_thousands(digits: str) -> str:
    groups = []
    while len(digits) > 3:
        groups.insert(0, digits[-3:])
        digits = digits[:-3]
    groups.insert(0, digits)
    return THOUSANDS_SEPARATOR.join(groups)


# =============================================================================
# NUMBERS AND CURRENCY
# =============================================================================

def format_localized_number(value: Any, decimals: int = 2) -> str:
    """
    Format a number with Eastern Arabic digits.

    1234567.891 -> "١٬٢٣٤٬٥٦٧٫٨٩"
    """
    decimals = max(int(decimals), 0)
    fixed = _round_half_up(to_decimal(value), decimals)

    sign = "-" if fixed < 0 else ""
    integer_part, _, fraction_part = f"{abs(fixed):f}".partition(".")

    text = sign + _group_thousands(integer_part)
    if decimals > 0:
        text += FRACTION_SEPARATOR + fraction_part
    return _to_eastern_digits(text)


def format_localized_currency(
    amount: Any,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
    decimals: int = 2,
) -> str:
    """Format an amount followed by a space and the currency symbol."""
    return f"{format_localized_number(amount, decimals)} {currency_symbol}"


def format_localized_date(value: Optional[date]) -> str:
    """Format a date as d/m/yyyy with Eastern Arabic digits."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        value = value.date()
    return _to_eastern_digits(f"{value.day}/{value.month}/{value.year}")


def to_minor_units(amount: Any) -> int:
    """Convert pounds to piastres, rounding half up."""
    return int(_round_half_up(to_decimal(amount) * MINOR_UNITS, 0))


def from_minor_units(minor: Any) -> Decimal:
    """Convert piastres to pounds."""
    return to_decimal(minor) / MINOR_UNITS


# =============================================================================
# AMOUNT IN WORDS
# =============================================================================

def _verbalize_below_hundred(value: int) -> str:
    if value == 0:
        return ""
    if value < 10:
        return ONES[value]
    if value < 20:
        return IRREGULAR_TEENS.get(value) or f"{ONES[value % 10]} {TEEN_SUFFIX_WORD}"

    ones_digit, tens_digit = value % 10, value // 10
    if ones_digit:
        return f"{ONES[ones_digit]} {CONJUNCTION}{TENS[tens_digit]}"
    return TENS[tens_digit]


def _verbalize_integer(value: int) -> str:
    """
    Words for a non-negative integer, without the currency unit.

    Decomposition: thousands multiplier, then hundreds digit, then the
    0-99 remainder. Multipliers of 10 or more recurse on the multiplier,
    which is strictly smaller than the value, so recursion ends.
    """
    parts = []

    thousands = value // 1000
    if thousands:
        if thousands < len(THOUSANDS):
            parts.append(THOUSANDS[thousands])
        else:
            parts.append(f"{_verbalize_integer(thousands)} {THOUSAND_WORD}")

    hundreds = (value % 1000) // 100
    if hundreds:
        parts.append(HUNDREDS[hundreds])

    remainder = _verbalize_below_hundred(value % 100)
    if remainder:
        parts.append(remainder)

    return " ".join(parts)


def number_to_words(value: Any) -> str:
    """
    Write an amount out in Arabic words for a printed voucher.

    12345.5 -> "اثنا عشر ألف ثلاثمائة خمسة وأربعون و خمسون قرش جنيه"

    The currency word is appended at the very end, after the piastres
    clause when there is one.
    """
    amount = to_decimal(value)
    magnitude = abs(amount)

    # Round in piastres first so x.995 carries into the pounds
    integer, fraction = divmod(to_minor_units(magnitude), MINOR_UNITS)
    if integer == 0 and fraction == 0:
        return ZERO_WORD
    if amount < 0:
        return f"{NEGATIVE_WORD} {number_to_words(magnitude)}"

    text = _verbalize_integer(integer)
    if fraction:
        text = f"{text} {CONJUNCTION} {_verbalize_integer(fraction)} {FRACTION_UNIT_WORD}"

    return f"{text.strip()} {CURRENCY_UNIT_WORD}"

