"""
Configuration loading.

Settings are read from config.yaml at the repository root. Every value has a
default, so a missing file or section falls back to the built in options.
"""

import logging
import os

import yaml

from .buhlmann_constants import GradientFactors, GF_DEFAULT
from .consumption import ConsumptionOptions, Diver, DEFAULT_PRIMARY_RESERVE, DEFAULT_STAGE_RESERVE
from .options import Options, SafetyStop

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), "config.yaml")


def _options_from_config(config: dict, gf: GradientFactors) -> Options:
    defaults = Options()
    gases_cfg = config.get("gases", {}) or {}
    environment_cfg = config.get("environment", {}) or {}
    speeds_cfg = config.get("speeds", {}) or {}
    deco_cfg = config.get("deco", {}) or {}

    return Options(
        gf_low=gf.gf_low,
        gf_high=gf.gf_high,
        max_ppo2=float(gases_cfg.get("max_ppo2", defaults.max_ppo2)),
        max_deco_ppo2=float(gases_cfg.get("max_deco_ppo2", defaults.max_deco_ppo2)),
        max_end=float(gases_cfg.get("max_end", defaults.max_end)),
        salt_water=bool(environment_cfg.get("salt_water", defaults.salt_water)),
        altitude=float(environment_cfg.get("altitude", defaults.altitude)),
        descent_speed=float(speeds_cfg.get("descent", defaults.descent_speed)),
        ascent_speed_50perc=float(speeds_cfg.get("ascent_50perc", defaults.ascent_speed_50perc)),
        ascent_speed_50perc_to_6m=float(
            speeds_cfg.get("ascent_50perc_to_6m", defaults.ascent_speed_50perc_to_6m)
        ),
        ascent_speed_6m=float(speeds_cfg.get("ascent_6m", defaults.ascent_speed_6m)),
        last_stop_depth=float(deco_cfg.get("last_stop_depth", defaults.last_stop_depth)),
        safety_stop=SafetyStop(deco_cfg.get("safety_stop", defaults.safety_stop.value)),
        problem_solving_duration=float(
            deco_cfg.get("problem_solving_duration", defaults.problem_solving_duration)
        ),
    )


def load_effective_config(
    gf_override: tuple = None,
    config_path: str = None,
) -> dict:
    """Load configuration from config.yaml with optional CLI GF override.

    Args:
        gf_override: (gf_low, gf_high) in percent, takes precedence over the file
        config_path: YAML file, defaults to config.yaml at the repository root

    Returns a dict with resolved settings:
        options:             Options instance
        diver:               Diver instance
        consumption_options: ConsumptionOptions instance
        config_path:         str (resolved path)
        gf_source:           'cli' | 'config' | 'default'
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    config = {}
    gf = GF_DEFAULT
    gf_source = "default"

    if os.path.exists(config_path):
        with open(config_path) as f:
            config = yaml.safe_load(f) or {}

        buhlmann_cfg = config.get("buhlmann", {})
        if buhlmann_cfg:
            gf = GradientFactors(
                gf_low=float(buhlmann_cfg.get("gf_low", GF_DEFAULT.gf_low)),
                gf_high=float(buhlmann_cfg.get("gf_high", GF_DEFAULT.gf_high)),
            )
            gf_source = "config"
    else:
        logger.info(f"Config file {config_path} not found, using defaults")

    if gf_override:
        gf = GradientFactors(
            gf_low=gf_override[0] / 100.0,
            gf_high=gf_override[1] / 100.0,
        )
        gf_source = "cli"

    diver_cfg = config.get("diver", {}) or {}
    diver = Diver(
        rmv=float(diver_cfg.get("rmv", Diver.rmv)),
        stress_rmv=float(diver_cfg.get("stress_rmv", Diver.stress_rmv)),
    )

    reserve_cfg = config.get("reserve", {}) or {}
    consumption_options = ConsumptionOptions(
        diver=diver,
        primary_tank_reserve=float(reserve_cfg.get("primary_tank", DEFAULT_PRIMARY_RESERVE)),
        stage_tank_reserve=float(reserve_cfg.get("stage_tank", DEFAULT_STAGE_RESERVE)),
    )

    return {
        "options": _options_from_config(config, gf),
        "diver": diver,
        "consumption_options": consumption_options,
        "config_path": config_path,
        "gf_source": gf_source,
    }
