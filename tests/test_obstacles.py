import random

import pytest

from runner.runner import round_half_up
from world.collision import CollisionBox
from world.obstacles import (
    CACTUS_LARGE,
    CACTUS_SMALL,
    PTERODACTYL,
    Obstacle,
    ObstacleField,
    ObstacleType,
    stretch_boxes,
)
from world.world import World


def _spawn_many(field, speed, n):
    out = []
    for _ in range(n):
        ob = field.create_obstacle(speed)
        if ob is not None:
            out.append(ob)
    return out


def test_no_type_repeats_back_to_back():
    field = ObstacleField(random.Random(1))
    names = [ob.type.name for ob in _spawn_many(field, 13.0, 300)]
    assert len(names) > 200
    for prev, cur in zip(names, names[1:]):
        assert prev != cur
    assert len(field.history) <= 3


def test_duplication_window():
    field = ObstacleField(random.Random(0))
    field.history = ["CACTUS_SMALL"]
    assert not field._duplicate_ok(CACTUS_SMALL)
    assert field._duplicate_ok(CACTUS_LARGE)
    field.history = ["CACTUS_LARGE", "CACTUS_SMALL", "CACTUS_SMALL"]
    assert field._duplicate_ok(CACTUS_SMALL)
    assert ObstacleField(random.Random(0))._duplicate_ok(CACTUS_SMALL)


def test_slow_track_has_single_cacti_only():
    field = ObstacleField(random.Random(2))
    obstacles = _spawn_many(field, 3.0, 200)
    assert obstacles
    assert all(ob.size == 1 for ob in obstacles)
    assert all(not ob.is_ptero for ob in obstacles)


def test_pterodactyls_are_always_single():
    field = ObstacleField(random.Random(3))
    pteros = [ob for ob in _spawn_many(field, 13.0, 300) if ob.is_ptero]
    assert pteros
    assert all(ob.size == 1 for ob in pteros)
    assert all(ob.y in PTERODACTYL.y_positions for ob in pteros)
    assert all(abs(ob.speed_offset) == PTERODACTYL.speed_offset for ob in pteros)


def test_gap_stays_within_bounds():
    field = ObstacleField(random.Random(4))
    speed = 10.0
    for ob in _spawn_many(field, speed, 200):
        low = round_half_up(ob.type.width * ob.size * speed + ob.type.min_gap * 0.6)
        assert low <= ob.gap <= round_half_up(low * 1.5)


def test_gap_ties_round_up():
    unit = ObstacleType(
        name="UNIT", width=1, height=10, y_positions=(100,), min_gap=0,
        min_speed=0.0, collision_boxes=(CollisionBox(0, 0, 1, 10),),
    )
    # max_duplication=1 lets the single type repeat
    field = ObstacleField(random.Random(10), types=(unit,), max_duplication=1)
    gaps = {ob.gap for ob in _spawn_many(field, 2.5, 200)}
    # g = 2.5 rounds to 3, 1.5 * 3 = 4.5 rounds to 5
    assert gaps == {3, 4, 5}


def test_multi_unit_groups_appear_at_speed():
    field = ObstacleField(random.Random(5))
    groups = [ob for ob in _spawn_many(field, 13.0, 300) if ob.size > 1]
    assert groups
    for ob in groups:
        assert ob.width == ob.type.width * ob.size
        assert ob.collision_boxes[2].x == ob.width - ob.type.collision_boxes[2].width


def test_stretch_boxes_covers_group_width():
    boxes = list(CACTUS_LARGE.collision_boxes)
    out = stretch_boxes(boxes, 75)
    assert out[0] == boxes[0]
    assert out[1].width == 75 - 7 - 10
    assert out[2] == CollisionBox(65, 10, 10, 38)
    # type definition stays untouched
    assert CACTUS_LARGE.collision_boxes[1].width == 7


def test_no_eligible_type_is_a_soft_failure():
    picky = ObstacleType(
        name="FAST_ONLY", width=10, height=10, y_positions=(100,), min_gap=100,
        min_speed=100.0, collision_boxes=(CollisionBox(0, 0, 10, 10),),
    )
    field = ObstacleField(random.Random(6), types=(picky,))
    assert field.create_obstacle(6.0) is None
    field.update(16.0, 6.0)
    assert field.obstacles == []
    assert field.history == []


def test_obstacle_scrolls_and_is_removed_off_screen():
    ob = Obstacle(type=CACTUS_SMALL, x=100, y=105, width=17, height=35)
    ob.update(100.0, 10.0)
    assert ob.x == pytest.approx(40, abs=1)
    assert not ob.remove

    ob.x = -10
    ob.update(100.0, 10.0)
    assert ob.remove


def test_ptero_flaps():
    ob = Obstacle(type=PTERODACTYL, x=300, y=50, width=46, height=40)
    ob.update(100.0, 9.0)
    assert ob.current_frame == 0
    ob.update(100.0, 9.0)
    assert ob.current_frame == 1


def test_field_spawns_only_when_allowed():
    field = ObstacleField(random.Random(7))
    field.update(16.0, 6.0, spawning=False)
    assert field.obstacles == []

    field.update(16.0, 6.0, spawning=True)
    assert len(field.obstacles) == 1
    first = field.first
    assert first.x < field.spawn_x

    # successor waits until the first has cleared its gap
    field.update(16.0, 6.0, spawning=True)
    assert len(field.obstacles) == 1
    first.x = field.spawn_x - first.width - first.gap - 50
    # only the other cactus is eligible now, so a tick may come up empty
    for _ in range(5):
        field.update(16.0, 6.0, spawning=True)
        if len(field.obstacles) == 2:
            break
    assert len(field.obstacles) == 2
    assert first.following_created


def test_world_nearest_obstacle_ignores_passed_ones():
    world = World(random.Random(8))
    behind = Obstacle(type=CACTUS_SMALL, x=20, y=105, width=17, height=35)
    ahead = Obstacle(type=CACTUS_SMALL, x=300, y=105, width=17, height=35)
    closer = Obstacle(type=CACTUS_LARGE, x=200, y=90, width=25, height=50)
    world.obstacles.obstacles = [behind, ahead, closer]
    near = world.nearest_obstacle(50)
    assert near.obstacle is closer
    assert near.distance == 150


def test_world_speeds_up_to_a_cap():
    world = World(random.Random(9))
    assert not world.obstacles_active
    for _ in range(20000):
        world.advance(1000 / 60)
    assert world.speed <= 13.0 + 0.001
    assert world.obstacles_active
    assert world.score > 0
