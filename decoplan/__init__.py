"""
Dive planning with the Bühlmann ZH-L16C decompression model.

Modules:
    - physics: depth to pressure conversion for salinity and altitude
    - buhlmann_constants: ZH-L16C constants and gradient factor calculations
    - gases, tanks: gas mixtures, gas registry and tank state
    - segments: dive profile segments
    - tissues: 16 compartment inert gas loading
    - algorithm: decompression profile and no decompression limit
    - interval_search: binary search of the bottom time boundary
    - plan_factory: user plans and the emergency ascent
    - consumption: gas consumption, reserve and maximum bottom time
    - events: safety events of a calculated profile
    - config: YAML configuration
"""

from .physics import DepthConverter
from .buhlmann_constants import GradientFactors, GF_DEFAULT
from .gases import Gas, GasCode, Gases, StandardGases
from .tanks import Tank
from .segments import Segment, Segments
from .options import Options, SafetyStop, AscentSpeeds
from .tissues import Tissues
from .algorithm import BuhlmannAlgorithm, CalculatedProfile, Ceiling, RestingParameters
from .interval_search import BinaryIntervalSearch, SearchContext
from .plan_factory import PlanFactory
from .consumption import Consumption, ConsumptionOptions, Diver
from .events import Event, EventType, ProfileEvents
from .config import load_effective_config

__all__ = [
    "DepthConverter",
    "GradientFactors",
    "GF_DEFAULT",
    "Gas",
    "GasCode",
    "Gases",
    "StandardGases",
    "Tank",
    "Segment",
    "Segments",
    "Options",
    "SafetyStop",
    "AscentSpeeds",
    "Tissues",
    "BuhlmannAlgorithm",
    "CalculatedProfile",
    "Ceiling",
    "RestingParameters",
    "BinaryIntervalSearch",
    "SearchContext",
    "PlanFactory",
    "Consumption",
    "ConsumptionOptions",
    "Diver",
    "Event",
    "EventType",
    "ProfileEvents",
    "load_effective_config",
]
