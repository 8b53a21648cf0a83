# bliss_api/utils/money.py
# Prices are stored as integer pesewas; cedis only appear at the API and
# gateway boundaries.

from decimal import Decimal, ROUND_HALF_UP

Money = Decimal

PESEWAS_PER_CEDI = 100

def D(x) -> Money:
    return x if isinstance(x, Decimal) else Decimal(str(x or "0"))

def round_money(x: Money) -> Money:
    return D(x).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

def to_ghs(pesewas: int) -> Money:
    return round_money(D(int(pesewas)) / PESEWAS_PER_CEDI)

def ghs_float(pesewas):
    """JSON-friendly cedi amount; ``None`` passes through (variant-priced products)."""
    if pesewas is None:
        return None
    return float(to_ghs(pesewas))

def to_pesewas(ghs) -> int:
    return int((D(ghs) * PESEWAS_PER_CEDI).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
