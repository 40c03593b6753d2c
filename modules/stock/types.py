from enum import Enum
from typing import Protocol


class MovementType(str, Enum):
    IN = "IN"
    OUT = "OUT"
    ADJUSTMENT = "ADJUSTMENT"


class StockLevel(str, Enum):
    CRITICAL = "CRITICAL"
    LOW = "LOW"
    NORMAL = "NORMAL"


class OrderQuantity(Protocol):
    """Anything carrying the number of units to produce (schema or ORM row)."""

    @property
    def quantity(self) -> float: ...
