"""Headless host for the tycoon engine.

Resumes a save (or starts a new game), drives `tick` on a fixed simulated
step, auto-saves every 30 s and writes the save back on exit.

`main` is a coroutine that yields to the event loop after every tick, so a
host that already runs a loop (a bot, a web server) can `await main([...])`
alongside its own tasks. `run` is the console entry point.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import time
from pathlib import Path
from typing import List, Optional

from tycoon.buildings import place_building
from tycoon.business import buy_business, hire_manager, run_all_businesses, tap_work
from tycoon.catalog import BUILDING_DEFS, BUSINESS_DEFS
from tycoon.config import DEFAULT_CONFIG, EngineConfig
from tycoon.progression import income_per_sec, manager_cost
from tycoon.save import export_save_text, load_game, save_game, to_dict
from tycoon.simulation import create_initial_state, resume, tick
from tycoon.store import GameState

logger = logging.getLogger("tycoon.host")

AUTO_SAVE_INTERVAL_MS = 30_000


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the tycoon simulation headless.")
    parser.add_argument("--save", type=Path, default=Path("save.json"),
                        help="save file to resume from and write back to")
    parser.add_argument("--seconds", type=float, default=600.0,
                        help="simulated seconds to run")
    parser.add_argument("--step-ms", type=float, default=250.0,
                        help="simulated milliseconds per tick")
    parser.add_argument("--seed", type=int, default=None,
                        help="seed for a new game (default: derived from the clock)")
    parser.add_argument("--export", type=Path, default=None,
                        help="also write an encrypted export of the final state here")
    parser.add_argument("--autoplay", action="store_true",
                        help="tap, build and buy greedily every tick")
    parser.add_argument("--offline-cap-seconds", type=float, default=None,
                        help="override the base offline cap")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def _autoplay(state: GameState, now: float) -> GameState:
    state = tap_work(state, now)
    for bdef in BUILDING_DEFS:
        empty = next((p for p in state.world.plots if p.building_id is None), None)
        if empty is None:
            break
        state = place_building(state, empty.id, bdef.id, now)
    for bdef in BUSINESS_DEFS:
        if not state.businesses[bdef.id].manager_owned and state.cash >= manager_cost(bdef):
            state = hire_manager(state, bdef.id, now)
        state = buy_business(state, bdef.id, now)
    return run_all_businesses(state, now)


async def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = DEFAULT_CONFIG
    if args.offline_cap_seconds is not None:
        config = EngineConfig(offline_cap_base_seconds=args.offline_cap_seconds)

    now = time.time() * 1000
    state = load_game(args.save, now)
    if state is None:
        seed = args.seed if args.seed is not None else int(now)
        logger.info("starting a new game with seed %d", seed)
        state = create_initial_state(now, seed, config)
    else:
        state = resume(to_dict(state), now, config)

    end = now + args.seconds * 1000
    last_save = now
    try:
        while now < end:
            now = min(end, now + args.step_ms)
            if args.autoplay:
                state = _autoplay(state, now)
            state = tick(state, now, config)
            if now - last_save >= AUTO_SAVE_INTERVAL_MS:
                save_game(state, args.save)
                last_save = now
            await asyncio.sleep(0)
    finally:
        save_game(state, args.save)

    if args.export is not None:
        try:
            args.export.write_text(export_save_text(state, encrypted=True), encoding="utf-8")
        except OSError as e:
            logger.error("error exporting save: %s", e)

    logger.info(
        "cash %.2f (safe %.2f), earned %.2f, income %.2f/s, trophies %d (%s), projects %d",
        state.cash, state.safe_cash, state.total_earned, income_per_sec(state),
        state.war.trophies, state.war.league, len(state.completed_projects),
    )


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
