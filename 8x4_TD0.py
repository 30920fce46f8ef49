import argparse
import logging
import sys

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from agent import RandomEnvironment, TDPlayer
from config import ConfigError
from TD_zero import td_learning
from weight import WeightFileError

logger = logging.getLogger("8x4_TD0")


def positive_int(text):
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError("must be at least 1, got %d" % value)
    return value


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Train a 2048 n-tuple network with TD(0)")
    parser.add_argument("--total", type=int, default=1000, help="Number of training episodes")
    parser.add_argument("--block", type=positive_int, default=100, help="Episodes per statistics block")
    parser.add_argument("--play", default="", help="Player arguments, e.g. 'alpha=0.0025 save=weights.bin'")
    parser.add_argument("--evil", default="", help="Environment arguments, e.g. 'seed=7'")
    parser.add_argument("--plot", default=None, help="Save the score curve to this image file")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(message)s", stream=sys.stdout)

    try:
        with TDPlayer(args.play) as player, RandomEnvironment(args.evil) as environment:
            final_scores = td_learning(player, environment, num_episodes=args.total, print_interval=args.block)
    except (ConfigError, WeightFileError) as e:
        logger.error("%s", e)
        return 1

    if args.plot:
        plt.plot(final_scores)
        plt.xlabel("Episodes")
        plt.ylabel("Scores")
        plt.title("Training Progress")
        plt.savefig(args.plot)
        plt.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
