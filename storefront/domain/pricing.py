# storefront/domain/pricing.py
from decimal import Decimal, ROUND_HALF_UP

CENTS = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")

# darmowa wysylka dla wszystkich zamowien
SHIPPING_FLAT = Decimal("0")


def effective_price(price, discount) -> Decimal:
    """Cena po rabacie procentowym; bez rabatu zwraca cene bazowa."""
    price = Decimal(str(price))
    discount = Decimal(str(discount or 0))
    if discount <= ZERO:
        return price
    value = price * (1 - discount / HUNDRED)
    return max(value, ZERO)


def round2(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def summarize(line_totals, item_count: int) -> dict:
    """
    Sumuje nie zaokraglone line totale, zaokragla dopiero agregaty.
    """
    subtotal = sum(line_totals, ZERO)
    total = subtotal + SHIPPING_FLAT
    return {
        "itemCount": item_count,
        "subtotal": round2(subtotal),
        "shipping": round2(SHIPPING_FLAT),
        "total": round2(total),
    }
