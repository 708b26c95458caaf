"""Inventory snapshot records consumed from the external inventory ledger.

The ledger itself lives outside this service; callers hand over the current
on-hand quantities as plain records.
"""
from dataclasses import dataclass, field
from typing import Any


@dataclass
class GreenCoffeeStock:
    """On-hand unroasted coffee."""
    coffee_name: str
    current_amount: float
    origin: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "coffee_name": self.coffee_name,
            "current_amount": self.current_amount,
            "origin": self.origin,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GreenCoffeeStock":
        return cls(
            coffee_name=data.get("coffee_name", ""),
            current_amount=data.get("current_amount", 0),
            origin=data.get("origin", ""),
        )


@dataclass
class RoastedCoffeeStock:
    """On-hand roasted coffee from a completed batch."""
    coffee_name: str
    current_amount: float
    roast_date: str = ""
    age_days: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "coffee_name": self.coffee_name,
            "current_amount": self.current_amount,
            "roast_date": self.roast_date,
            "age_days": self.age_days,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RoastedCoffeeStock":
        return cls(
            coffee_name=data.get("coffee_name", ""),
            current_amount=data.get("current_amount", 0),
            roast_date=data.get("roast_date", ""),
            age_days=data.get("age_days", 0),
        )


@dataclass
class InventorySnapshot:
    """Current inventory as reported by the ledger."""
    green: list[GreenCoffeeStock] = field(default_factory=list)
    roasted: list[RoastedCoffeeStock] = field(default_factory=list)

    def green_amounts(self) -> dict[str, float]:
        """On-hand green amount per coffee name, summed across lots."""
        amounts: dict[str, float] = {}
        for stock in self.green:
            amounts[stock.coffee_name] = amounts.get(stock.coffee_name, 0) + stock.current_amount
        return amounts

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InventorySnapshot":
        return cls(
            green=[GreenCoffeeStock.from_dict(item) for item in data.get("green", [])],
            roasted=[RoastedCoffeeStock.from_dict(item) for item in data.get("roasted", [])],
        )
