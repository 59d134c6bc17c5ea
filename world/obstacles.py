"""
runner_evo module: world/obstacles.py

Obstacle system:
- three obstacle types (small cactus, large cactus, pterodactyl)
- one obstacle at a time plus a successor once the last one has cleared its gap
- type picking limited by minimum speed and by a duplication window over the
  recent type history
- obstacles scroll left with the track and are culled off-screen
"""

from __future__ import annotations
from dataclasses import dataclass, field
import math
import random
from typing import List, Optional, Set, Tuple

import config
from runner.runner import round_half_up
from world.collision import CollisionBox


@dataclass(frozen=True)
class ObstacleType:
    name: str
    width: int
    height: int
    y_positions: Tuple[int, ...]
    min_gap: int
    min_speed: float
    collision_boxes: Tuple[CollisionBox, ...]
    # speed needed before the type may come in groups; None = always single
    multiple_speed: Optional[float] = None
    num_frames: int = 0
    frame_rate: float = 0.0
    speed_offset: float = 0.0

    @property
    def is_cactus(self) -> bool:
        return self.name.startswith("CACTUS")


CACTUS_SMALL = ObstacleType(
    name="CACTUS_SMALL",
    width=17,
    height=35,
    y_positions=(105,),
    min_gap=120,
    min_speed=0.0,
    multiple_speed=4.0,
    collision_boxes=(
        CollisionBox(0, 7, 5, 27),
        CollisionBox(4, 0, 6, 34),
        CollisionBox(10, 4, 7, 14),
    ),
)

CACTUS_LARGE = ObstacleType(
    name="CACTUS_LARGE",
    width=25,
    height=50,
    y_positions=(90,),
    min_gap=120,
    min_speed=0.0,
    multiple_speed=7.0,
    collision_boxes=(
        CollisionBox(0, 12, 7, 38),
        CollisionBox(8, 0, 7, 49),
        CollisionBox(13, 10, 10, 38),
    ),
)

PTERODACTYL = ObstacleType(
    name="PTERODACTYL",
    width=46,
    height=40,
    y_positions=(50, 100),
    min_gap=150,
    min_speed=8.5,
    num_frames=2,
    frame_rate=1000 / 6,
    speed_offset=0.8,
    collision_boxes=(
        CollisionBox(15, 15, 16, 5),
        CollisionBox(18, 21, 24, 6),
        CollisionBox(2, 14, 4, 3),
        CollisionBox(6, 10, 4, 7),
        CollisionBox(10, 8, 6, 9),
    ),
)

OBSTACLE_TYPES: Tuple[ObstacleType, ...] = (CACTUS_SMALL, CACTUS_LARGE, PTERODACTYL)


@dataclass
class Obstacle:
    type: ObstacleType
    x: float
    y: float
    width: float
    height: float
    size: int = 1
    collision_boxes: List[CollisionBox] = field(default_factory=list)
    current_frame: int = 0
    timer: float = 0.0
    speed_offset: float = 0.0
    gap: int = 0
    following_created: bool = False
    remove: bool = False
    # runner ids that already collected the pass-through bonus
    rewarded_by: Set[int] = field(default_factory=set)

    @property
    def is_ptero(self) -> bool:
        return self.type.name == PTERODACTYL.name

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def right(self) -> float:
        return self.x + self.width

    def update(self, dt: float, speed: float) -> None:
        if self.remove:
            return
        effective = speed + self.speed_offset
        self.x -= math.floor(effective * config.FPS / 1000 * dt)

        if self.type.num_frames and self.type.frame_rate:
            self.timer += dt
            if self.timer >= self.type.frame_rate:
                self.current_frame = (self.current_frame + 1) % self.type.num_frames
                self.timer = 0.0

        if self.x + self.width < 0:
            self.remove = True


def stretch_boxes(boxes: List[CollisionBox], width: float) -> List[CollisionBox]:
    """
    Widen the middle box and move the right box so a multi-unit group is
    covered edge to edge.
    """
    if len(boxes) < 3:
        return list(boxes)
    left, middle, right = boxes[0], boxes[1], boxes[2]
    out = list(boxes)
    out[1] = CollisionBox(middle.x, middle.y, width - left.width - right.width, middle.height)
    out[2] = CollisionBox(width - right.width, right.y, right.width, right.height)
    return out


class ObstacleField:
    def __init__(
        self,
        rng: random.Random,
        spawn_x: float = config.CANVAS_W,
        types: Tuple[ObstacleType, ...] = OBSTACLE_TYPES,
        max_duplication: int = config.MAX_OBSTACLE_DUPLICATION,
    ):
        self.rng = rng
        self.spawn_x = spawn_x
        self.types = types
        self.max_duplication = max_duplication
        self.obstacles: List[Obstacle] = []
        # newest first
        self.history: List[str] = []

    def reset(self) -> None:
        self.obstacles = []
        self.history = []

    @property
    def first(self) -> Optional[Obstacle]:
        if self.obstacles and not self.obstacles[0].remove:
            return self.obstacles[0]
        return None

    def _duplicate_ok(self, candidate: ObstacleType) -> bool:
        # the candidate counts as one slot of the window
        recent = self.history[: self.max_duplication - 1]
        return not (recent and all(t == candidate.name for t in recent))

    def pick_type(self, speed: float) -> Optional[ObstacleType]:
        for _ in range(config.OBSTACLE_PICK_RETRIES):
            candidate = self.types[self.rng.randrange(len(self.types))]
            if speed >= candidate.min_speed and self._duplicate_ok(candidate):
                return candidate
        return None

    def create_obstacle(self, speed: float) -> Optional[Obstacle]:
        """
        Build the next obstacle, or None when no type passes the rules this tick.
        """
        chosen = self.pick_type(speed)
        if chosen is None:
            return None

        y = chosen.y_positions[self.rng.randrange(len(chosen.y_positions))]

        size = self.rng.randint(1, config.MAX_OBSTACLE_LENGTH)
        if size > 1 and (chosen.multiple_speed is None or speed < chosen.multiple_speed):
            size = 1

        min_gap = round_half_up(chosen.width * size * speed + chosen.min_gap * config.GAP_COEFFICIENT)
        gap = self.rng.randint(min_gap, round_half_up(min_gap * 1.5))

        offset = 0.0
        if chosen.speed_offset:
            offset = chosen.speed_offset if self.rng.random() > 0.5 else -chosen.speed_offset

        width = chosen.width * size
        boxes = list(chosen.collision_boxes)
        if size > 1:
            boxes = stretch_boxes(boxes, width)

        self.history.insert(0, chosen.name)
        del self.history[config.OBSTACLE_HISTORY_LEN:]

        return Obstacle(
            type=chosen,
            x=self.spawn_x,
            y=y,
            width=width,
            height=chosen.height,
            size=size,
            collision_boxes=boxes,
            speed_offset=offset,
            gap=gap,
        )

    def _maybe_spawn(self, speed: float) -> None:
        if not self.obstacles:
            ob = self.create_obstacle(speed)
            if ob is not None:
                self.obstacles.append(ob)
            return

        last = self.obstacles[-1]
        if not last.following_created and last.x + last.width + last.gap < self.spawn_x:
            nxt = self.create_obstacle(speed)
            if nxt is not None:
                self.obstacles.append(nxt)
                last.following_created = True

    def update(self, dt: float, speed: float, spawning: bool = True) -> None:
        if spawning:
            self._maybe_spawn(speed)

        for ob in self.obstacles:
            ob.update(dt, speed)

        self.obstacles = [ob for ob in self.obstacles if not ob.remove]
