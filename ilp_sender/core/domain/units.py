"""
Units — wire-представление сумм и длительностей

Суммы и длительности хранятся как Decimal. На wire (JSON и query string)
они всегда пишутся в fixed-point форме: str(Decimal("0.0000001")) даёт
"1E-7", а ledger и коннекторы принимают только ^[0-9]+(\\.[0-9]+)?$.

ЗАПРЕЩЕНО сериализовать Decimal суммы через str() в обход этого модуля.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import PlainSerializer


def format_amount(value: Decimal) -> str:
    """Decimal → fixed-point строка без экспоненты."""
    return format(value, "f")


# Decimal, который в JSON режиме сериализуется через format_amount
FixedPointDecimal = Annotated[
    Decimal, PlainSerializer(format_amount, return_type=str, when_used="json")
]
