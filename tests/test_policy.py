import config
from runner.policy import Action, apply_action, argmax, choose_action
from runner.runner import Runner, RunnerStatus
from world.obstacles import CACTUS_LARGE, PTERODACTYL, Obstacle
from world.world import NearestObstacle


def _near(type_, x, y):
    ob = Obstacle(type=type_, x=x, y=y, width=type_.width, height=type_.height)
    return NearestObstacle(obstacle=ob, distance=x - config.RUNNER_START_X)


def _running():
    r = Runner(id=1)
    r.start_running()
    return r


def test_argmax_prefers_first_on_ties():
    assert argmax([0.2, 0.9, 0.1]) == 1
    assert argmax([0.5, 0.5, 0.5]) == 0


def test_choose_action_is_plain_argmax_without_low_ptero():
    r = _running()
    near = _near(CACTUS_LARGE, 100, 90)
    assert choose_action([0.7, 0.2, 0.4], r, near) == Action.JUMP
    assert choose_action([0.1, 0.2, 0.4], r, near) == Action.RUN


def test_low_close_ptero_boosts_duck():
    r = _running()
    near = _near(PTERODACTYL, 50 + 60, 100)
    assert choose_action([0.6, 0.3, 0.5], r, near) == Action.DUCK
    # boost is +0.5 only
    assert choose_action([0.9, 0.3, 0.5], r, near) == Action.JUMP


def test_far_ptero_gets_no_boost():
    r = _running()
    near = _near(PTERODACTYL, 50 + 90, 100)
    assert choose_action([0.6, 0.3, 0.5], r, near) == Action.JUMP


def test_duck_sets_release_threshold():
    r = _running()
    near = _near(CACTUS_LARGE, 120, 90)
    apply_action(r, Action.DUCK, near, speed=6.0)
    assert r.ducking
    assert r.status == RunnerStatus.DUCKING
    assert r.duck_until_x == 120 + 25 + config.DUCK_SAFETY_MARGIN


def test_duck_needs_an_obstacle_ahead():
    r = _running()
    apply_action(r, Action.DUCK, NearestObstacle(), speed=6.0)
    assert not r.ducking


def test_duck_ignored_mid_jump():
    r = _running()
    apply_action(r, Action.JUMP, NearestObstacle(), speed=6.0)
    apply_action(r, Action.DUCK, _near(CACTUS_LARGE, 120, 90), speed=6.0)
    assert r.jumping and not r.ducking


def test_jump_ignored_while_ducking():
    r = _running()
    near = _near(CACTUS_LARGE, 120, 90)
    apply_action(r, Action.DUCK, near, speed=6.0)
    apply_action(r, Action.JUMP, near, speed=6.0)
    assert r.ducking and not r.jumping


def test_run_keeps_duck_while_obstacle_is_close():
    r = _running()
    near = _near(CACTUS_LARGE, 120, 90)
    apply_action(r, Action.DUCK, near, speed=6.0)
    apply_action(r, Action.RUN, near, speed=6.0)
    assert r.ducking


def test_run_releases_duck_when_track_clears():
    r = _running()
    apply_action(r, Action.DUCK, _near(CACTUS_LARGE, 120, 90), speed=6.0)
    apply_action(r, Action.RUN, _near(CACTUS_LARGE, 50 + 200, 90), speed=6.0)
    assert not r.ducking
    assert r.duck_until_x is None
    assert r.status == RunnerStatus.RUNNING


def test_run_releases_duck_past_threshold():
    r = _running()
    apply_action(r, Action.DUCK, _near(CACTUS_LARGE, 120, 90), speed=6.0)
    r.duck_until_x = r.x - 1
    apply_action(r, Action.RUN, _near(CACTUS_LARGE, 120, 90), speed=6.0)
    assert not r.ducking
