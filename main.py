"""
Endless-runner neuroevolution: a population of runners shares one track,
each driven by its own network; when all are dead the population is bred
and the run restarts.
"""

from __future__ import annotations
import argparse
import logging
from typing import Optional

import config
from neural.display import NetworkDisplay
from persistence.store import BackgroundSaver, JsonFileStore
from simulation import GameState, Simulation

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Endless-runner neuroevolution trainer")
    parser.add_argument("--headless", action="store_true", help="Train without a window")
    parser.add_argument("--generations", type=int, default=10, help="Generations to run in headless mode")
    parser.add_argument("--population", type=int, default=config.POPULATION_SIZE, help="Runners per generation")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible runs")
    parser.add_argument("--data-dir", default=config.DATA_DIR, help="Where checkpoints and best weights are stored")
    parser.add_argument("--auto-run", action="store_true", help="Start the next generation automatically")
    parser.add_argument("--max-ticks", type=int, default=60 * config.FPS * 10, help="Tick cap per headless generation")
    return parser.parse_args(argv)


def build_simulation(args: argparse.Namespace, saver: BackgroundSaver) -> Simulation:
    display = NetworkDisplay()
    sim = Simulation(
        population_size=args.population,
        seed=args.seed,
        store=saver,
        display=display,
        auto_run=args.auto_run,
        on_generation=lambda g: logger.info("Now on generation %d", g),
    )
    sim.load_from_store()
    return sim


def run_headless(sim: Simulation, generations: int, max_ticks: int) -> None:
    for _ in range(generations):
        result = sim.run_generation(max_ticks=max_ticks)
        if result is None:
            logger.info("Tick cap reached at generation %d, forcing rollover", sim.generation)
            for runner in sim.runners:
                if runner.alive:
                    runner.crash()
            sim.end_generation()
    sim.save_checkpoint()


def run_window(sim: Simulation) -> None:
    import pygame

    from render.renderer import draw_ground, draw_hud, draw_network, draw_obstacles, draw_runners
    from render import colors

    pygame.init()
    screen = pygame.display.set_mode((config.SCREEN_W, config.SCREEN_H))
    pygame.display.set_caption("runner_evo (Neuroevolution)")
    clock = pygame.time.Clock()

    debug = False
    running = True
    panel_top = config.SCREEN_H - config.PANEL_H

    while running:
        clock.tick(config.FPS)

        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                running = False
            elif e.type == pygame.KEYDOWN:
                if e.key == pygame.K_ESCAPE:
                    running = False
                elif e.key == pygame.K_TAB:
                    debug = not debug
                elif e.key == pygame.K_SPACE and sim.state == GameState.WAITING:
                    sim.start()
                elif e.key == pygame.K_r:
                    sim.restart()
                elif e.key == pygame.K_a:
                    sim.auto_run = not sim.auto_run
                    if sim.auto_run and sim.state == GameState.WAITING:
                        sim.start()
                elif e.key == pygame.K_n:
                    sim.reset_training()

        for _ in range(max(1, config.SIM_SPEED)):
            sim.tick(config.MS_PER_FRAME)

        # Render
        screen.fill(colors.BG)
        draw_ground(screen)
        draw_obstacles(screen, sim.world.obstacles.obstacles, debug=debug)
        draw_runners(screen, sim.runners, debug=debug)

        stats = sim.stats()
        stats["auto_run"] = sim.auto_run
        draw_hud(screen, stats)
        if sim.display is not None:
            draw_network(screen, sim.display, panel_top)

        pygame.display.flip()

    pygame.quit()


def main(argv: Optional[list[str]] = None) -> None:
    logging.basicConfig(level=logging.INFO)
    args = parse_args(argv)
    saver = BackgroundSaver(JsonFileStore(args.data_dir))
    sim = build_simulation(args, saver)
    try:
        if args.headless:
            run_headless(sim, args.generations, args.max_ticks)
        else:
            run_window(sim)
    finally:
        saver.flush()
        saver.shutdown()


if __name__ == "__main__":
    main()
