"""
runner_evo module: runner/runner.py

One runner on the shared track:
- status state machine WAITING -> RUNNING <-> {JUMPING, DUCKING}, any -> CRASHED
- jump physics with a minimum height and speed-drop early ending
- per-status animation profile (presentation data only)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import math
from typing import Dict, List, Optional, Tuple

import config
from world.collision import CollisionBox


class RunnerStatus(Enum):
    WAITING = "WAITING"
    RUNNING = "RUNNING"
    JUMPING = "JUMPING"
    DUCKING = "DUCKING"
    CRASHED = "CRASHED"


@dataclass(frozen=True)
class AnimProfile:
    frames: Tuple[int, ...]
    ms_per_frame: float


ANIM_FRAMES: Dict[RunnerStatus, AnimProfile] = {
    RunnerStatus.WAITING: AnimProfile(frames=(44, 0), ms_per_frame=1000 / 3),
    RunnerStatus.RUNNING: AnimProfile(frames=(88, 132), ms_per_frame=1000 / 12),
    RunnerStatus.CRASHED: AnimProfile(frames=(220,), ms_per_frame=1000 / 60),
    RunnerStatus.JUMPING: AnimProfile(frames=(0,), ms_per_frame=1000 / 60),
    RunnerStatus.DUCKING: AnimProfile(frames=(264, 323), ms_per_frame=1000 / 8),
}

# sub-hitboxes relative to the runner's top-left corner; jumping uses RUNNING
RUNNING_BOXES: Tuple[CollisionBox, ...] = (
    CollisionBox(22, 0, 17, 16),
    CollisionBox(1, 18, 30, 9),
    CollisionBox(10, 35, 14, 8),
    CollisionBox(1, 24, 29, 5),
    CollisionBox(5, 30, 21, 4),
    CollisionBox(9, 34, 15, 4),
)
DUCKING_BOXES: Tuple[CollisionBox, ...] = (CollisionBox(1, 18, 55, 25),)


def ground_y() -> float:
    return config.CANVAS_H - config.BOTTOM_PAD - config.RUNNER_HEIGHT


def round_half_up(x: float) -> int:
    # Python's round() is banker's rounding; the physics uses half-up
    return int(math.floor(x + 0.5))


@dataclass
class Runner:
    id: int
    x: float = config.RUNNER_START_X
    y: float = field(default_factory=ground_y)
    ground_y: float = field(default_factory=ground_y)
    min_jump_height: float = 0.0

    jumping: bool = False
    ducking: bool = False
    jump_velocity: float = 0.0
    reached_min_height: bool = False
    speed_drop: bool = False

    # animation
    current_frame: int = 0
    timer: float = 0.0
    ms_per_frame: float = ANIM_FRAMES[RunnerStatus.WAITING].ms_per_frame
    anim_frames: List[int] = field(default_factory=lambda: list(ANIM_FRAMES[RunnerStatus.WAITING].frames))

    status: RunnerStatus = RunnerStatus.WAITING
    alive: bool = True
    duck_until_x: Optional[float] = None
    prev_distance: Optional[float] = None
    fitness: float = 0.0

    def __post_init__(self) -> None:
        if not self.min_jump_height:
            self.min_jump_height = self.ground_y - config.MIN_JUMP_HEIGHT

    # ---- geometry ----

    @property
    def height(self) -> float:
        return config.RUNNER_HEIGHT_DUCK if self.ducking else config.RUNNER_HEIGHT

    @property
    def duck_clearance_y(self) -> float:
        """Top of the ducking silhouette; anything reaching below it must be ducked."""
        return self.ground_y - config.RUNNER_HEIGHT_DUCK

    @property
    def on_ground(self) -> bool:
        return self.y >= self.ground_y

    def collision_boxes(self) -> Tuple[CollisionBox, ...]:
        return DUCKING_BOXES if self.ducking else RUNNING_BOXES

    # ---- state machine ----

    def set_status(self, status: RunnerStatus) -> None:
        if self.status == status:
            return
        profile = ANIM_FRAMES[status]
        self.status = status
        self.current_frame = 0
        self.ms_per_frame = profile.ms_per_frame
        self.anim_frames = list(profile.frames)

    def start_running(self) -> None:
        if self.alive:
            self.set_status(RunnerStatus.RUNNING)

    def start_jump(self, speed: float) -> bool:
        if self.jumping or self.ducking:
            return False
        self.set_status(RunnerStatus.JUMPING)
        self.jump_velocity = config.INITIAL_JUMP_VELOCITY - speed / 10
        self.jumping = True
        self.reached_min_height = False
        self.speed_drop = False
        return True

    def end_jump(self) -> None:
        if self.reached_min_height and self.jump_velocity < config.DROP_VELOCITY:
            self.jump_velocity = config.DROP_VELOCITY

    def start_duck(self, until_x: float) -> bool:
        if self.jumping:
            return False
        self.ducking = True
        self.duck_until_x = until_x
        self.set_status(RunnerStatus.DUCKING)
        return True

    def stop_duck(self) -> None:
        self.ducking = False
        self.duck_until_x = None
        self.set_status(RunnerStatus.RUNNING)

    def crash(self) -> None:
        self.alive = False
        self.set_status(RunnerStatus.CRASHED)

    def reset(self) -> None:
        self.y = self.ground_y
        self.jumping = False
        self.ducking = False
        self.duck_until_x = None
        self.jump_velocity = 0.0
        self.reached_min_height = False
        self.speed_drop = False
        self.current_frame = 0
        self.timer = 0.0
        self.alive = True
        self.prev_distance = None
        self.fitness = 0.0
        self.set_status(RunnerStatus.WAITING)

    # ---- per-tick update ----

    def update(self, dt: float) -> None:
        if not self.alive:
            return

        self.timer += dt
        if self.timer >= self.ms_per_frame:
            self.current_frame = 0 if self.current_frame >= len(self.anim_frames) - 1 else self.current_frame + 1
            self.timer = 0.0

        if self.jumping:
            self._update_jump(dt)

    def _update_jump(self, dt: float) -> None:
        frames_elapsed = dt / self.ms_per_frame

        self.y += round_half_up(self.jump_velocity * frames_elapsed)
        self.jump_velocity += config.RUNNER_GRAVITY * frames_elapsed

        if self.y < self.min_jump_height or self.speed_drop:
            self.reached_min_height = True

        if self.y < config.MAX_JUMP_HEIGHT or self.speed_drop:
            self.end_jump()

        # landed
        if self.y >= self.ground_y:
            self.y = self.ground_y
            self.jumping = False
            self.jump_velocity = 0.0
            self.reached_min_height = False
            self.speed_drop = False
            self.set_status(RunnerStatus.RUNNING)
