"""Entry point: ``python -m hexroyale``.

  - ``python -m hexroyale run``   → Headless battle with built-in strategies
  - ``python -m hexroyale phases`` → Print the phase schedule for a player count
"""

from __future__ import annotations

import argparse
import logging

from hexroyale.core.enums import AgentClass

logger = logging.getLogger(__name__)

DEFAULT_CLASSES = ",".join(c.value for c in AgentClass)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Hex-grid battle-royale simulation")
    sub = parser.add_subparsers(dest="command")

    run = sub.add_parser("run", help="Run a headless battle (default)")
    run.add_argument("--seed", type=int, default=42)
    run.add_argument("--classes", type=str, default=DEFAULT_CLASSES,
                     help="Comma-separated agent classes, one agent each")
    run.add_argument("--radius", type=int, default=3)
    run.add_argument("--max-epochs", type=int, default=100)
    run.add_argument("--workers", type=int, default=4)
    run.add_argument("--volatility", type=float, default=1.5,
                     help="Max percent move per asset per epoch")
    run.add_argument("--replay", type=str, default="replay.json")
    run.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING"])

    phases = sub.add_parser("phases", help="Show the phase schedule")
    phases.add_argument("players", type=int)

    return parser


def _parse_classes(raw: str) -> list[AgentClass]:
    try:
        return [AgentClass(part.strip().upper()) for part in raw.split(",") if part.strip()]
    except ValueError as exc:
        raise SystemExit(f"Unknown agent class in {raw!r}: {exc}") from None


def _run_battle(args: argparse.Namespace) -> None:
    from hexroyale.config import ArenaConfig
    from hexroyale.engine.arena import ArenaManager
    from hexroyale.engine.epoch import EpochProcessor, EpochResult
    from hexroyale.engine.worker_pool import WorkerPool
    from hexroyale.systems.market import SimulatedMarketFeed
    from hexroyale.utils.logging import setup_logging
    from hexroyale.utils.replay import ReplayRecorder

    config = ArenaConfig(
        seed=args.seed,
        grid_radius=args.radius,
        num_workers=args.workers,
        max_epochs=args.max_epochs,
        replay_file=args.replay,
        log_level=args.log_level,
    )
    setup_logging(config.log_level)

    arena = ArenaManager(config)
    arena.spawn_agents(_parse_classes(args.classes))
    arena.start_battle_immediate()

    market = SimulatedMarketFeed(arena.rng, volatility=args.volatility)
    recorder = ReplayRecorder(config.replay_file, config.seed)
    pool = WorkerPool(config, arena.rng)
    processor = EpochProcessor(config, pool)

    def _on_epoch(result: EpochResult) -> None:
        recorder.record_epoch(result)
        for event in arena.event_log.for_epoch(result.epoch):
            logger.info("  [%s] %s", event.category, event.message)

    logger.info("=== Battle %s started (seed=%d, %d agents) ===",
                arena.battle_id, config.seed, len(arena.agents))
    try:
        processor.run(arena, market, on_epoch=_on_epoch)
    finally:
        pool.shutdown()

    if arena.record is not None:
        recorder.record_outcome(arena.record)
        logger.info("Winner: %s", arena.record.winner_reason)
    else:
        logger.info("Stopped after %d epochs with %d agents alive",
                    arena.epoch, len(arena.alive_agents()))
    recorder.flush()


def _show_phases(args: argparse.Namespace) -> None:
    from hexroyale.core.phases import compute_phase_config

    config = compute_phase_config(args.players)
    for phase in config.phases:
        storm = "none" if phase.storm_ring < 0 else f"ring >= {phase.storm_ring}"
        print(f"{phase.name.value:<12} epochs {phase.start_epoch:>2}-{phase.end_epoch:<2} "
              f"combat={'on' if phase.combat_enabled else 'off':<3} storm={storm}")
    print(f"Total: {config.total_epochs} epochs for {config.player_count} players")


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    if args.command is None:
        args = parser.parse_args(["run"])
    if args.command == "run":
        _run_battle(args)
    elif args.command == "phases":
        _show_phases(args)


if __name__ == "__main__":
    main()
