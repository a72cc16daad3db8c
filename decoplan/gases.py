"""
Breathing gas mixtures and the registry of gases available during a dive.

A gas is identified by its composition, not by object identity: two instances
with the same oxygen and helium content (rounded to whole percents) are the
same gas. The rounded composition is exposed as a GasCode, used as dictionary
key wherever volumes are aggregated per gas.
"""

from typing import List, NamedTuple, Optional

from .physics import DepthConverter

# Minimum oxygen partial pressure to stay conscious (bar)
MIN_PPO2 = 0.18

# Depth difference between two deco stops or gas switches (meters)
STOP_DISTANCE = 3

O2_IN_AIR = 0.21


class GasCode(NamedTuple):
    """Composition key: fractions rounded to two decimals, as integer percents."""
    o2: int
    he: int

    @property
    def value(self) -> int:
        """The composition encoded into a single integer."""
        return self.o2 * 1000 + self.he


class Gas:
    """Immutable gas mixture defined by oxygen and helium fractions."""

    __slots__ = ("_fo2", "_fhe")

    def __init__(self, fO2: float, fHe: float = 0.0):
        if not (0.0 < fO2 <= 1.0):
            raise ValueError(f"fO2 must be in (0, 1.0], got {fO2}")
        if not (0.0 <= fHe < 1.0):
            raise ValueError(f"fHe must be in [0, 1.0), got {fHe}")
        if fO2 + fHe > 1.0 + 1e-9:
            raise ValueError(f"fO2 + fHe must not exceed 1.0, got {fO2 + fHe}")
        self._fo2 = fO2
        self._fhe = fHe

    @property
    def fO2(self) -> float:
        return self._fo2

    @property
    def fHe(self) -> float:
        return self._fhe

    @property
    def fN2(self) -> float:
        return 1.0 - self._fo2 - self._fhe

    @property
    def content_code(self) -> GasCode:
        return GasCode(round(self._fo2 * 100), round(self._fhe * 100))

    @property
    def name(self) -> str:
        o2, he = self.content_code
        if he == 0:
            if o2 == 21:
                return "Air"
            if o2 == 100:
                return "Oxygen"
            return f"EAN{o2}"
        if o2 + he == 100:
            return f"Heliox {o2}/{he}"
        return f"Trimix {o2}/{he}"

    def composition_equals(self, other: "Gas") -> bool:
        return other is not None and self.content_code == other.content_code

    def __eq__(self, other):
        if not isinstance(other, Gas):
            return NotImplemented
        return self.composition_equals(other)

    def __hash__(self):
        return hash(self.content_code)

    def __repr__(self):
        return f"Gas(fO2={self._fo2}, fHe={self._fhe})"

    def mod_pressure(self, ppo2: float) -> float:
        """Ambient pressure (bar) at which the gas reaches the ppO2 limit."""
        return ppo2 / self._fo2

    def mod(self, ppo2: float, converter: DepthConverter) -> float:
        """
        Calculates maximum operation depth.

        Args:
            ppo2: partial pressure of oxygen limit (bar)
            converter: salinity/altitude dependent depth converter

        Returns:
            Depth in meters.
        """
        return converter.from_bar(self.mod_pressure(ppo2))

    def end(self, depth: float, converter: DepthConverter) -> float:
        """
        Calculates equivalent narcotic depth.

        Helium has a narcotic factor of 0 while N2 and O2 have a factor of 1.

        Returns:
            Depth in meters.
        """
        narcotic_index = self._fo2 + self.fN2
        bars = converter.to_bar(depth)
        return converter.from_bar(bars * narcotic_index)

    def ceiling(self, surface_pressure: float) -> float:
        """Minimum ambient pressure (bar) at which the gas is not hypoxic."""
        bars = MIN_PPO2 / self._fo2
        # hyperoxic gases would need pressure below the surface
        if bars < surface_pressure:
            return surface_pressure
        return bars

    def ceiling_depth(self, converter: DepthConverter) -> float:
        """Minimum depth (m) at which the gas is not hypoxic."""
        return converter.from_bar(self.ceiling(converter.surface_pressure))


class StandardGases:
    air = Gas(O2_IN_AIR, 0.0)
    ean32 = Gas(0.32, 0.0)
    ean36 = Gas(0.36, 0.0)
    ean50 = Gas(0.50, 0.0)
    oxygen = Gas(1.0, 0.0)
    trimix_18_45 = Gas(0.18, 0.45)
    trimix_10_70 = Gas(0.10, 0.70)


class Gases:
    """Registry of bottom gases and ordered deco gases available for a dive."""

    def __init__(self):
        self.bottom_gases: List[Gas] = []
        self.deco_gases: List[Gas] = []

    def add_bottom_gas(self, gas: Gas) -> None:
        self.bottom_gases.append(gas)

    def add_deco_gas(self, gas: Gas) -> None:
        self.deco_gases.append(gas)

    def is_registered(self, gas: Gas) -> bool:
        return gas in self.bottom_gases or gas in self.deco_gases

    def _fits(self, gas: Gas, depth: float, options, converter: DepthConverter) -> bool:
        mod = round(gas.mod(options.max_deco_ppo2, converter))
        end = round(gas.end(depth, converter))
        return depth <= mod and end <= options.max_end

    def best_deco_gas(self, depth: float, options, converter: DepthConverter) -> Optional[Gas]:
        """
        Highest oxygen deco gas breathable at the depth.

        The gas has to stay within the deco ppO2 limit and the maximum END.
        Candidates with equal oxygen keep the first registered.
        """
        found = None
        for candidate in self.deco_gases:
            if self._fits(candidate, depth, options, converter):
                if found is None or found.fO2 < candidate.fO2:
                    found = candidate
        return found

    def switch_depth(self, gas: Gas, options, converter: DepthConverter) -> int:
        """Deepest stop depth at which the gas may be used as deco gas."""
        mod = round(gas.mod(options.max_deco_ppo2, converter))
        return max(0, mod // STOP_DISTANCE * STOP_DISTANCE)

    def next_gas_switch(
        self,
        current: Gas,
        from_depth: float,
        to_depth: float,
        options,
        converter: DepthConverter,
    ) -> float:
        """
        Deepest depth between from_depth (exclusive) and to_depth (inclusive)
        where a deco gas richer in oxygen than the current gas is available.

        Returns to_depth, if there is no such gas.
        """
        found = to_depth
        for candidate in self.deco_gases:
            if candidate.fO2 <= current.fO2:
                continue

            switch_depth = self.switch_depth(candidate, options, converter)
            end = round(candidate.end(switch_depth, converter))
            if to_depth <= switch_depth < from_depth and end <= options.max_end:
                found = max(found, switch_depth)

        return found
