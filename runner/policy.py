"""
runner_evo module: runner/policy.py

Turns network outputs into runner actions.
"""

from __future__ import annotations
from enum import IntEnum
from typing import List, Sequence

import config
from runner.runner import Runner
from world.world import NearestObstacle


class Action(IntEnum):
    JUMP = 0
    DUCK = 1
    RUN = 2


def argmax(values: Sequence[float]) -> int:
    # first index wins ties
    best_idx = 0
    for i in range(1, len(values)):
        if values[i] > values[best_idx]:
            best_idx = i
    return best_idx


def choose_action(outputs: Sequence[float], runner: Runner, nearest: NearestObstacle) -> Action:
    """
    Argmax over (jump, duck, run), with the duck output boosted when a low
    pterodactyl is about to arrive.
    """
    scores: List[float] = list(outputs)
    if nearest.is_low_ptero(runner.duck_clearance_y) and nearest.distance < config.DUCK_BOOST_DISTANCE:
        scores[Action.DUCK] += config.DUCK_BOOST
    return Action(argmax(scores))


def apply_action(runner: Runner, action: Action, nearest: NearestObstacle, speed: float) -> None:
    if action == Action.JUMP:
        if not runner.jumping and not runner.ducking:
            runner.start_jump(speed)

    elif action == Action.DUCK:
        if not runner.jumping and nearest.obstacle is not None:
            ob = nearest.obstacle
            runner.start_duck(ob.x + ob.width + config.DUCK_SAFETY_MARGIN)

    elif action == Action.RUN:
        if runner.jumping or not runner.ducking:
            return
        if runner.duck_until_x is not None and runner.x > runner.duck_until_x:
            runner.stop_duck()
        elif nearest.obstacle is None or nearest.distance > config.DUCK_RELEASE_DISTANCE:
            runner.stop_duck()
