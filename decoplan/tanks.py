"""
Tank state tracked during a consumption pass.

Consumed gas and reserve are stored in liters, so they stay valid when the
tank size or fill pressure is edited. Pressures are relative to the surface,
the same values shown on a manometer.
"""

from typing import List

from .gases import Gas, Gases, StandardGases


class Tank:
    """Gas cylinder with its fill and the volumes consumed and kept as reserve."""

    def __init__(self, size: float, start_pressure: float, gas: Gas = StandardGases.air):
        if size <= 0:
            raise ValueError("Size needs to be non zero positive amount in liters")
        if start_pressure <= 0:
            raise ValueError("Start pressure needs to be positive number in bars")

        self.size = size
        self.start_pressure = start_pressure
        self.gas = gas
        self.consumed_volume = 0.0
        self.reserve_volume = 0.0

    @classmethod
    def create_default(cls) -> "Tank":
        """15 L, filled with 200 bar Air."""
        return cls(15, 200, StandardGases.air)

    @property
    def volume(self) -> float:
        """Total volume of stored gas at start pressure in liters."""
        return self.size * self.start_pressure

    @property
    def consumed(self) -> float:
        """Consumed gas in bars."""
        return self.consumed_volume / self.size

    @property
    def reserve(self) -> float:
        """Reserve which should remain in the tank in bars."""
        return self.reserve_volume / self.size

    @property
    def end_pressure(self) -> float:
        remaining = self.start_pressure - self.consumed
        return remaining if remaining > 0 else 0.0

    @property
    def end_volume(self) -> float:
        return self.size * self.end_pressure

    @property
    def percents_remaining(self) -> float:
        return self.end_pressure / self.start_pressure * 100

    @property
    def has_reserve(self) -> bool:
        """True, if remaining gas is greater or equal to reserve."""
        return self.end_volume >= self.reserve_volume

    def consume(self, liters: float) -> float:
        """Consumes up to the remaining volume, returns liters really consumed."""
        liters = max(0.0, liters)
        really_consumed = min(liters, self.volume - self.consumed_volume)
        really_consumed = max(0.0, really_consumed)
        self.consumed_volume += really_consumed
        return really_consumed

    def add_reserve(self, liters: float) -> float:
        """Adds reserve up to the tank volume, returns liters really added."""
        liters = max(0.0, liters)
        really_added = min(liters, self.volume - self.reserve_volume)
        really_added = max(0.0, really_added)
        self.reserve_volume += really_added
        return really_added

    def __repr__(self):
        return f"Tank({self.gas.name}, {self.size} L, {self.start_pressure} b)"


def to_gases(tanks: List[Tank]) -> Gases:
    """First tank holds the bottom gas, all other tanks are deco/stage gases."""
    gases = Gases()
    for index, tank in enumerate(tanks):
        if index == 0:
            gases.add_bottom_gas(tank.gas)
        else:
            gases.add_deco_gas(tank.gas)
    return gases


def have_reserve(tanks: List[Tank]) -> bool:
    """Checks, if all tanks have more remaining gas than their reserve."""
    return all(tank.has_reserve for tank in tanks)


def reset_consumption(tanks: List[Tank]) -> None:
    """Sets consumed and reserve of all tanks to 0."""
    for tank in tanks:
        tank.consumed_volume = 0.0
        tank.reserve_volume = 0.0
