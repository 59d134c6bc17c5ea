"""
runner_evo module: evolution/fitness.py

Per-tick fitness shaping for alive runners:
- survival + speed bonuses every tick
- reward/penalty against a heuristic "correct" action near obstacles
- penalties for pointless jumps/ducks on open track
- one-time bonus per obstacle passed
"""

from __future__ import annotations
from typing import Iterable

import config
from runner.policy import Action
from runner.runner import Runner
from world.obstacles import Obstacle
from world.world import NearestObstacle


def correct_action(runner: Runner, nearest: NearestObstacle, speed: float) -> Action:
    ob = nearest.obstacle
    if ob is None:
        return Action.RUN

    if ob.is_ptero:
        return Action.DUCK if nearest.is_low_ptero(runner.duck_clearance_y) else Action.JUMP

    if ob.type.is_cactus:
        seconds_to_impact = nearest.distance / max(speed * config.FPS, 1e-3)
        if seconds_to_impact < config.CACTUS_JUMP_TIME:
            return Action.JUMP
    return Action.RUN


def score_action(runner: Runner, action: Action, nearest: NearestObstacle, speed: float) -> float:
    """Reward (or penalty) for the action chosen this tick."""
    if nearest.obstacle is None:
        if action == Action.RUN:
            return config.REWARD_CLEAR_RUN
        if action == Action.JUMP:
            return config.PENALTY_IDLE_JUMP
        return config.PENALTY_IDLE_DUCK

    if nearest.distance >= config.CLOSE_DISTANCE:
        if action == Action.JUMP:
            return config.PENALTY_IDLE_JUMP
        if action == Action.DUCK:
            return config.PENALTY_CLOSE_IDLE_DUCK
        return 0.0

    wanted = correct_action(runner, nearest, speed)
    low_ptero_duck = wanted == Action.DUCK and nearest.is_ptero
    if action == wanted:
        return config.REWARD_DUCK_PTERO if low_ptero_duck else config.REWARD_CORRECT
    return config.PENALTY_MISSED_DUCK if low_ptero_duck else config.PENALTY_WRONG


def pass_bonus(runner: Runner, obstacles: Iterable[Obstacle]) -> float:
    bonus = 0.0
    for ob in obstacles:
        if ob.remove:
            continue
        if ob.x + ob.width < runner.x and runner.id not in ob.rewarded_by:
            ob.rewarded_by.add(runner.id)
            bonus += config.REWARD_PASS
    return bonus


def score_tick(
    runner: Runner,
    action: Action,
    nearest: NearestObstacle,
    obstacles: Iterable[Obstacle],
    speed: float,
    dt: float,
) -> float:
    """
    Total fitness change for one alive runner on one tick; also adds it to
    ``runner.fitness``. Dead runners are left untouched.
    """
    if not runner.alive:
        return 0.0

    delta = dt * config.SURVIVAL_REWARD
    delta += score_action(runner, action, nearest, speed)
    delta += pass_bonus(runner, obstacles)
    delta += speed / config.MAX_SPEED * config.SPEED_BONUS

    runner.fitness += delta
    return delta
