"""Amount in words using the Indian numbering system.

``123456789.5`` reads "Twelve Crore Thirty Four Lakh Fifty Six Thousand Seven
Hundred Eighty Nine Rupees and Fifty Paise Only". The phrase is printed on
invoices as-is, so the template below is part of the output contract.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ..errors import ValidationError

ONES = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]
TENS = [
    "", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty",
    "Ninety",
]

# (divisor, label) from the largest period down; crore recurses for larger values.
PERIODS = [
    (10_000_000, "Crore"),
    (100_000, "Lakh"),
    (1_000, "Thousand"),
    (100, "Hundred"),
]

WITH_SUBUNIT = "{major} {currency} and {minor} {subunit} Only"
WHOLE_ONLY = "{major} {currency} Only"


def integer_to_words(num: int) -> str:
    """Spell ``num`` with Indian grouping; ``0`` becomes ``"Zero"``."""

    if num < 0:
        raise ValidationError("NEGATIVE_AMOUNT", "Amount cannot be negative")
    if num == 0:
        return "Zero"
    return _spell(num)


def _spell(num: int) -> str:
    if num < 20:
        return ONES[num]
    if num < 100:
        rest = ONES[num % 10]
        return TENS[num // 10] + (f" {rest}" if rest else "")
    for divisor, label in PERIODS:
        if num >= divisor:
            head, tail = divmod(num, divisor)
            words = f"{_spell(head)} {label}"
            return f"{words} {_spell(tail)}" if tail else words
    raise AssertionError("unreachable")  # pragma: no cover


def amount_in_words(
    amount: Decimal | int | float | str,
    currency: str = "Rupees",
    subunit: str = "Paise",
) -> str:
    """Return ``amount`` as an invoice phrase.

    >>> amount_in_words(0)
    'Zero Rupees Only'
    >>> amount_in_words("100000.05")
    'One Lakh Rupees and Five Paise Only'
    """

    try:
        value = Decimal(str(amount))
    except InvalidOperation as exc:
        raise ValidationError("BAD_AMOUNT", f"Not a number: {amount!r}") from exc
    if not value.is_finite():
        raise ValidationError("BAD_AMOUNT", f"Not a number: {amount!r}")
    if value < 0:
        raise ValidationError("NEGATIVE_AMOUNT", "Amount cannot be negative")

    value = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    major = int(value)
    minor = int((value - major) * 100)

    if minor:
        return WITH_SUBUNIT.format(
            major=integer_to_words(major),
            currency=currency,
            minor=integer_to_words(minor),
            subunit=subunit,
        )
    return WHOLE_ONLY.format(major=integer_to_words(major), currency=currency)
