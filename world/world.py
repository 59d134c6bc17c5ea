"""
runner_evo module: world/world.py

Track state container: speed, elapsed time, distance, obstacles.
"""

from __future__ import annotations
from dataclasses import dataclass
import math
import random
from typing import Optional

import config
from world.obstacles import Obstacle, ObstacleField


@dataclass
class NearestObstacle:
    """Front-most obstacle still ahead of the runners, shared by all of them for one tick."""
    obstacle: Optional[Obstacle] = None
    distance: float = math.inf

    @property
    def present(self) -> bool:
        return self.obstacle is not None

    @property
    def is_ptero(self) -> bool:
        return self.obstacle is not None and self.obstacle.is_ptero

    def is_low_ptero(self, duck_clearance_y: float) -> bool:
        return self.is_ptero and self.obstacle.bottom > duck_clearance_y


class World:
    def __init__(self, rng: random.Random, width: int = config.CANVAS_W):
        self.width = width
        self.obstacles = ObstacleField(rng, spawn_x=width)
        self.speed = config.SPEED
        self.running_time = 0.0
        self.distance_ran = 0.0

    def reset(self) -> None:
        self.obstacles.reset()
        self.speed = config.SPEED
        self.running_time = 0.0
        self.distance_ran = 0.0

    @property
    def score(self) -> int:
        return math.ceil(self.distance_ran * config.SCORE_COEFFICIENT)

    @property
    def obstacles_active(self) -> bool:
        return self.running_time > config.CLEAR_TIME

    def advance(self, dt: float) -> None:
        """Clock, distance and acceleration for one tick."""
        self.running_time += dt
        self.distance_ran += self.speed * dt / config.MS_PER_FRAME
        if self.speed < config.MAX_SPEED:
            self.speed += config.ACCELERATION

    def nearest_obstacle(self, x: float = config.RUNNER_START_X) -> NearestObstacle:
        nearest = NearestObstacle()
        for ob in self.obstacles.obstacles:
            if ob.remove or ob.x <= x:
                continue
            d = ob.x - x
            if d < nearest.distance:
                nearest = NearestObstacle(obstacle=ob, distance=d)
        return nearest

    def update_obstacles(self, dt: float) -> None:
        self.obstacles.update(dt, self.speed, spawning=self.obstacles_active)
