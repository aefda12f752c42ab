# agirace/main.py
import argparse
import logging
import sys

from agirace.config import Config
from agirace.engine import GameEngine
from agirace.errors import AgiRaceError
from agirace.persistence import load_state, save_state
from agirace.policies import POLICIES
from agirace.scenarios import SCENARIOS, make_scenario
from agirace.utils import round1
from agirace.victory import closest_victory, most_urgent_threat

logger = logging.getLogger("agirace")

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="agirace", description="Run a seeded AGI race simulation.")
    p.add_argument("--turns", type=int, default=32)
    p.add_argument("--seed", type=int, default=42)
    p.add_argument("--log", action="store_true", help="print the game log as it happens")
    p.add_argument("--events", action="store_true", help="enable random world events")
    p.add_argument("--policy", choices=sorted(POLICIES), default="heuristic")
    p.add_argument("--scenario", choices=sorted(SCENARIOS), default="baseline")
    p.add_argument("--load", metavar="PATH", help="resume from a save file")
    p.add_argument("--save", metavar="PATH", help="write the final state to a save file")
    p.add_argument("--plot", metavar="PATH", help="write a dashboard image")
    p.add_argument("-v", "--verbose", action="store_true")
    return p

def print_summary(engine: GameEngine) -> None:
    s = engine.state
    print("--- Summary ---")
    for f in s.factions.values():
        print(f"{f.name}: cap {round1(f.capability_score)} / safety {round1(f.safety_score)} / "
              f"trust {round1(f.resources.trust)} / compute {round1(f.resources.compute)} / "
              f"techs {len(f.unlocked_techs)}")
    print(f"Global Safety: {round1(s.global_safety)}")

    player = engine.cfg.player_faction_id
    if player in s.factions:
        best = closest_victory(s, player, engine.cfg)
        threat = most_urgent_threat(s, player, engine.cfg)
        if best is not None: print(f"{s.factions[player].name} closest path: {best.label} ({best.progress}%)")
        if threat is not None: print(f"{s.factions[player].name} top threat: {threat.label} ({threat.progress}%)")

    if not s.game_over:
        print("Outcome: undecided")
    elif s.winner_id:
        print(f"Winner: {s.factions[s.winner_id].name} ({s.victory_type})")
    elif s.loss_type:
        print(f"Outcome: {s.loss_type} ({s.factions[s.loser_id].name})")
    else:
        print(f"Outcome: {s.victory_type}")

def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    base = Config(seed=args.seed)
    base.flags.enable_events = args.events
    try:
        cfg, state = make_scenario(args.scenario, base)
        cfg.seed = args.seed
        if args.load:
            state = load_state(args.load)
            logger.info("resumed from %s at turn %d", args.load, state.turn)
        engine = GameEngine(cfg, state)
        policy = POLICIES[args.policy]

        for _ in range(args.turns):
            if engine.state.game_over: break
            lines = engine.step(policy)
            if args.log:
                for line in lines: print(line)
    except AgiRaceError as e:
        logger.error("%s", e)
        return 1

    print_summary(engine)
    if args.save:
        save_state(engine.state, args.save, cfg)
        print(f"Saved to {args.save}")
    if args.plot:
        from agirace.plotting import plot_race_dashboard, save_figure
        df = engine.frame()
        fig = plot_race_dashboard(df, engine.state)
        if fig is not None:
            save_figure(fig, args.plot)
            print(f"Dashboard written to {args.plot}")
    return 0

if __name__ == "__main__":
    sys.exit(main())
