import logging
import time
from dataclasses import dataclass

import numpy as np

from board import ILLEGAL, Board

logger = logging.getLogger(__name__)


@dataclass
class EpisodeRecord:
    score: int
    max_tile: int
    moves: int
    seconds: float


def play_episode(player, environment, board=None):
    """
    Play one game: the environment opens with two tiles, then the player and
    the environment alternate until an action cannot be applied.
    """
    if board is None:
        board = Board()
    start = time.perf_counter()
    player.open_episode()
    environment.open_episode()

    for _ in range(2):
        environment.take_action(board).apply(board)

    score = 0
    moves = 0
    while True:
        reward = player.take_action(board).apply(board)
        if reward == ILLEGAL:
            break
        score += reward
        moves += 1
        if environment.take_action(board).apply(board) == ILLEGAL:
            break

    player.close_episode()
    environment.close_episode()
    return EpisodeRecord(score, board.max_tile(), moves, time.perf_counter() - start)


def summarize(records):
    """
    Block statistics: average and max score, moves per second, and the share
    of episodes whose largest tile reached each value from 2048 up.
    """
    scores = np.array([r.score for r in records])
    tiles = np.array([r.max_tile for r in records])
    seconds = sum(r.seconds for r in records)
    moves = sum(r.moves for r in records)
    reached = {}
    tile = 2048
    while tile <= tiles.max():
        reached[tile] = float(np.mean(tiles >= tile))
        tile *= 2
    return {
        "avg": float(scores.mean()),
        "max": int(scores.max()),
        "ops": moves / seconds if seconds > 0 else 0.0,
        "reached": reached,
    }


def td_learning(player, environment, num_episodes=1000, print_interval=100):
    """
    Trains the player by self-play against the environment. Learning itself
    happens in player.close_episode at the end of every game.

    Args:
        player: TDPlayer (or any player agent) making the moves.
        environment: Agent inserting new tiles.
        num_episodes: Number of training episodes.
        print_interval: Number of episodes per logged statistics block.
    Returns:
        The final score of every episode.
    """
    if print_interval < 1:
        raise ValueError("print_interval must be at least 1, got %d" % print_interval)
    final_scores = []
    block = []
    for episode in range(num_episodes):
        record = play_episode(player, environment)
        final_scores.append(record.score)
        block.append(record)

        if (episode + 1) % print_interval == 0 or episode + 1 == num_episodes:
            stats = summarize(block)
            logger.info("Episode %d/%d | Avg Score: %.2f | Max Score: %d | Ops: %.0f/s",
                        episode + 1, num_episodes, stats["avg"], stats["max"], stats["ops"])
            for tile, share in stats["reached"].items():
                logger.info("\t%d\t%.1f%%", tile, 100 * share)
            block = []
    return final_scores
