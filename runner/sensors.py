"""
runner_evo module: runner/sensors.py

Normalized network inputs for one runner, built from the tick's shared
nearest-obstacle snapshot.
"""

from __future__ import annotations
from dataclasses import astuple, dataclass, fields
import math
from typing import List

import config
from runner.runner import Runner
from world.world import NearestObstacle


@dataclass
class GameInputs:
    obstacle_distance: float = 0.0
    obstacle_height: float = 0.0
    dino_y_velocity: float = 0.0
    game_speed: float = 0.0
    is_on_ground: float = 0.0
    time_to_impact: float = 1.0
    obstacle_present: float = 0.0
    is_ptero: float = 0.0
    ptero_rel_height: float = 0.0
    inv_distance: float = 0.0
    d_distance: float = 0.0
    enhanced_duck_signal: float = 0.0

    def as_vector(self) -> List[float]:
        return [float(v) for v in astuple(self)]

    @staticmethod
    def labels() -> List[str]:
        return [f.name for f in fields(GameInputs)]


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def encode_inputs(runner: Runner, nearest: NearestObstacle, speed: float) -> GameInputs:
    """
    Build the 12 features for ``runner``. Updates ``runner.prev_distance`` so
    the approach rate (d_distance) is tracked per runner.
    """
    ob = nearest.obstacle
    dist = nearest.distance

    closeness = 1.0 - min(dist / config.SENSE_RANGE, 1.0) if ob is not None else 0.0

    inputs = GameInputs(
        obstacle_distance=closeness,
        obstacle_height=min(ob.height / runner.height, 1.0) if ob is not None else 0.0,
        dino_y_velocity=(runner.jump_velocity + 20) / 40,
        game_speed=speed / config.MAX_SPEED,
        is_on_ground=1.0 if runner.on_ground else 0.0,
        inv_distance=closeness,
    )

    px_per_second = speed * config.FPS
    inputs.time_to_impact = min(dist / max(px_per_second, 1e-3), 1.0) if ob is not None else 1.0
    inputs.obstacle_present = 1.0 if ob is not None and dist < config.CLOSE_DISTANCE else 0.0

    if nearest.is_ptero:
        inputs.is_ptero = 1.0
        span = runner.ground_y - config.PTERO_TOP_Y
        inputs.ptero_rel_height = _clamp((runner.ground_y - ob.y) / span, 0.0, 1.0)
        low = nearest.is_low_ptero(runner.duck_clearance_y)
        inputs.enhanced_duck_signal = 1.0 if low and dist < config.DUCK_SIGNAL_DISTANCE else 0.0

    # first observation has no history: treat it as no change
    prev = runner.prev_distance if runner.prev_distance is not None else dist
    if ob is not None:
        per_second = (prev - dist) * config.FPS
        inputs.d_distance = _clamp(per_second / config.DDIST_NORM, -1.0, 1.0)
        runner.prev_distance = dist
    else:
        runner.prev_distance = math.inf

    return inputs
