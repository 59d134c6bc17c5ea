"""
runner_evo module: world/collision.py

Axis-aligned box collision between runners and the front-most obstacle:
- broad phase on 1px-inset whole-body boxes
- fine phase over every (runner sub-box x obstacle sub-box) pair
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List, Optional

import config

if TYPE_CHECKING:
    from runner.runner import Runner
    from world.obstacles import Obstacle


@dataclass(frozen=True)
class CollisionBox:
    x: float
    y: float
    width: float
    height: float

    def offset(self, dx: float, dy: float) -> "CollisionBox":
        return CollisionBox(self.x + dx, self.y + dy, self.width, self.height)

    def inset(self, px: float = 1.0) -> "CollisionBox":
        return CollisionBox(self.x + px, self.y + px, self.width - 2 * px, self.height - 2 * px)

    def overlaps(self, other: "CollisionBox") -> bool:
        return boxes_overlap(self, other)


def boxes_overlap(a: CollisionBox, b: CollisionBox) -> bool:
    return (
        a.x < b.x + b.width
        and a.x + a.width > b.x
        and a.y < b.y + b.height
        and a.y + a.height > b.y
    )


def runner_outline(runner: "Runner") -> CollisionBox:
    # width stays at the standing width even while ducking
    return CollisionBox(runner.x, runner.y, config.RUNNER_WIDTH, runner.height).inset(1)


def obstacle_outline(obstacle: "Obstacle") -> CollisionBox:
    return CollisionBox(obstacle.x, obstacle.y, obstacle.width, obstacle.height).inset(1)


def check_runner(runner: "Runner", obstacle: "Obstacle") -> bool:
    """
    True if any runner sub-box overlaps any obstacle sub-box.
    Stops at the first overlapping pair.
    """
    if not boxes_overlap(runner_outline(runner), obstacle_outline(obstacle)):
        return False

    for rbox in runner.collision_boxes():
        adj_r = rbox.offset(runner.x, runner.y)
        for obox in obstacle.collision_boxes:
            if boxes_overlap(adj_r, obox.offset(obstacle.x, obstacle.y)):
                return True
    return False


def check_collisions(runners: Iterable["Runner"], obstacle: Optional["Obstacle"]) -> List["Runner"]:
    """
    Test every alive runner against the front-most obstacle and crash the ones
    that hit it. Returns the runners that crashed this call.
    """
    crashed: List["Runner"] = []
    if obstacle is None or obstacle.remove:
        return crashed

    for runner in runners:
        if not runner.alive or config.ENABLE_NOCLIP:
            continue
        if check_runner(runner, obstacle):
            runner.crash()
            crashed.append(runner)
    return crashed
