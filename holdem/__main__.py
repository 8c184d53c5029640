import argparse
import logging
import random
from functools import partial
from typing import Optional, Sequence

from .bots import Strategy, baseline_strategy, passive_strategy
from .models import TableConfig
from .table import Table

LOGGER = logging.getLogger("holdem.sim")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play Texas Hold'em hands between built-in bots")
    parser.add_argument("--seats", type=int, default=6)
    parser.add_argument("--starting-stack", type=int, default=10_000)
    parser.add_argument("--sb", type=int, default=50)
    parser.add_argument("--bb", type=int, default=100)
    parser.add_argument("--hands", type=int, default=100, help="maximum number of hands to play")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--strategy",
        choices=("baseline", "passive"),
        default="baseline",
        help="bot used for every seat",
    )
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> Table:
    config = TableConfig(seats=args.seats, starting_stack=args.starting_stack, sb=args.sb, bb=args.bb)
    table = Table(config, names=[f"Bot{idx}" for idx in range(args.seats)], seed=args.seed)
    rng = random.Random(args.seed)
    strategy: Strategy = partial(baseline_strategy, rng=rng) if args.strategy == "baseline" else passive_strategy
    total_chips = sum(player.stack for player in table.state.players)

    for _ in range(args.hands):
        if not table.can_start_hand():
            break
        table.start_hand()
        while not table.is_hand_complete():
            seat = table.next_actor()
            if seat is None:
                break
            result = table.submit(seat, *strategy(table.state, seat))
            if not result.ok:
                table.submit(seat, *passive_strategy(table.state, seat))

    remaining = sum(player.stack for player in table.state.players)
    if remaining != total_chips:
        LOGGER.error("Chip count drifted: started with %s, ended with %s", total_chips, remaining)
    return table


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))
    table = run(args)
    result = table.match_result()
    LOGGER.info("Played %s hands", result["hands_played"])
    for entry in result["final_stacks"]:
        print(f"seat {entry['seat']} {entry['name']}: {entry['stack']}")


if __name__ == "__main__":
    main()
