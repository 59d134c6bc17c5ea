"""
runner_evo module: render/renderer.py

Pygame rendering of the track, the runners and the display network.
Drawing only reads simulation state.
"""

from __future__ import annotations
from typing import Dict, List, Sequence, Tuple
import pygame

import config
from neural.display import NetworkDisplay
from render import colors
from runner.runner import Runner
from world.obstacles import Obstacle


def _draw_boxes(screen: pygame.Surface, boxes, ox: float, oy: float) -> None:
    for b in boxes:
        pygame.draw.rect(screen, colors.HITBOX, pygame.Rect(int(ox + b.x), int(oy + b.y), int(b.width), int(b.height)), 1)


def draw_ground(screen: pygame.Surface) -> None:
    pygame.draw.line(screen, colors.GROUND, (0, config.HORIZON_Y), (config.CANVAS_W, config.HORIZON_Y), 1)


def draw_obstacles(screen: pygame.Surface, obstacles: Sequence[Obstacle], debug: bool = False) -> None:
    for ob in obstacles:
        if ob.remove:
            continue
        col = colors.PTERO if ob.is_ptero else colors.CACTUS
        rect = pygame.Rect(int(ob.x), int(ob.y), int(ob.width), int(ob.height))
        pygame.draw.rect(screen, col, rect)
        if ob.is_ptero:
            # wing flap: two-frame cue on the top edge
            wing_y = rect.top if ob.current_frame == 0 else rect.top + rect.height // 3
            pygame.draw.line(screen, colors.GROUND, (rect.left, wing_y), (rect.right, wing_y), 2)
        if debug:
            _draw_boxes(screen, ob.collision_boxes, ob.x, ob.y)


def draw_runners(screen: pygame.Surface, runners: Sequence[Runner], debug: bool = False) -> None:
    # draw back to front so the lead runner ends on top
    for runner in reversed(runners):
        if not runner.alive:
            continue
        width = config.RUNNER_WIDTH_DUCK if runner.ducking else config.RUNNER_WIDTH
        top = runner.y + (config.RUNNER_HEIGHT - runner.height)
        col = colors.RUNNER_LEAD if runner is runners[0] else colors.RUNNER
        pygame.draw.rect(screen, col, pygame.Rect(int(runner.x), int(top), width, int(runner.height)), 1)
        if debug:
            _draw_boxes(screen, runner.collision_boxes(), runner.x, runner.y)


def draw_hud(screen: pygame.Surface, stats: dict) -> None:
    font = pygame.font.Font(None, 22)

    lines = [
        f"score: {stats.get('score', 0)} | hi-score: {stats.get('high_score', 0)}",
        f"status: {stats.get('state', '')}  remaining: {stats.get('alive', 0)}/{stats.get('population', 0)}",
        f"generation: {stats.get('generation', 0)}  best fitness: {stats.get('best_fitness', 0.0):.0f}",
        f"speed: {stats.get('speed', 0.0):.2f}  auto-run: {'on' if stats.get('auto_run') else 'off'}",
    ]

    x = config.CANVAS_W + 16
    y = 10
    for line in lines:
        txt = font.render(line, True, colors.TEXT)
        screen.blit(txt, (x, y))
        y += 20


def _layer_positions(sizes: Sequence[int], left: int, top: int, width: int, height: int) -> List[List[Tuple[int, int]]]:
    out: List[List[Tuple[int, int]]] = []
    n_layers = len(sizes)
    for li, n in enumerate(sizes):
        x = left + int(width * (li + 0.5) / n_layers)
        out.append([(x, top + int(height * (i + 0.5) / n)) for i in range(n)])
    return out


def draw_network(screen: pygame.Surface, display: NetworkDisplay, top: int) -> None:
    """
    Side panel: connections colored by weight sign, neurons shaded by activation.
    """
    panel = pygame.Rect(0, top, config.SCREEN_W, config.SCREEN_H - top)
    pygame.draw.rect(screen, colors.PANEL_BG, panel)

    data = display.visualization_data()
    layers: Dict[str, List[float]] = {
        "input": data.inputs,
        "hidden1": data.hidden1,
        "hidden2": data.hidden2,
        "output": data.outputs,
    }
    names = list(layers.keys())
    sizes = display.architecture.sizes
    pos = _layer_positions(sizes, 40, top + 30, config.SCREEN_W - 80, panel.height - 50)

    for li in range(len(names) - 1):
        for i, a in enumerate(pos[li]):
            for j, b in enumerate(pos[li + 1]):
                w = display.get_weight(names[li], i, names[li + 1], j)
                col = colors.WEIGHT_POS if w >= 0 else colors.WEIGHT_NEG
                pygame.draw.line(screen, col, a, b, max(1, int(abs(w) * 2)))

    for li, name in enumerate(names):
        values = layers[name]
        for i, (x, y) in enumerate(pos[li]):
            v = values[i] if i < len(values) else 0.0
            v = max(0.0, min(1.0, v))
            col = tuple(int(off + (on - off) * v) for off, on in zip(colors.NEURON_OFF, colors.NEURON_ON))
            pygame.draw.circle(screen, col, (x, y), 8)

    font = pygame.font.Font(None, 20)
    title = f"neural network  {data.architecture}  weights: {data.total_weights}  neurons: {data.total_neurons}"
    screen.blit(font.render(title, True, colors.PANEL_TEXT), (12, top + 8))
