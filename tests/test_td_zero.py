import logging
import runpy
from pathlib import Path

import pytest

from agent import RandomEnvironment, RandomPlayer, TDPlayer
from board import Board, DIRECTIONS, ILLEGAL
from TD_zero import EpisodeRecord, play_episode, summarize, td_learning
from weight import load_weights

ROOT = Path(__file__).resolve().parent.parent


def test_episode_runs_until_no_move_is_left():
    board = Board()
    record = play_episode(RandomPlayer("seed=1"), RandomEnvironment("seed=2"), board)
    assert record.moves > 0
    assert record.score >= 0
    assert record.max_tile == board.max_tile()
    assert all(board.copy().slide(op) == ILLEGAL for op in DIRECTIONS)


def test_episode_is_reproducible_with_seeds():
    first = play_episode(RandomPlayer("seed=1"), RandomEnvironment("seed=2"))
    second = play_episode(RandomPlayer("seed=1"), RandomEnvironment("seed=2"))
    assert (first.score, first.moves, first.max_tile) == (second.score, second.moves, second.max_tile)


def test_episode_trains_player():
    player = TDPlayer("alpha=0.1")
    record = play_episode(player, RandomEnvironment("seed=4"))
    assert len(player.history) == record.moves
    assert any(table.value.any() for table in player.approximator.weights)


def test_summarize_reports_tile_shares():
    records = [EpisodeRecord(100, 2048, 10, 1.0), EpisodeRecord(300, 4096, 30, 1.0),
               EpisodeRecord(200, 512, 20, 2.0)]
    stats = summarize(records)
    assert stats["avg"] == 200
    assert stats["max"] == 300
    assert stats["ops"] == 15
    assert stats["reached"] == {2048: 2 / 3, 4096: 1 / 3}


def test_td_learning_logs_blocks(caplog):
    caplog.set_level(logging.INFO, logger="TD_zero")
    scores = td_learning(RandomPlayer("seed=1"), RandomEnvironment("seed=1"), num_episodes=5, print_interval=2)
    assert len(scores) == 5
    blocks = [r for r in caplog.records if r.getMessage().startswith("Episode")]
    assert len(blocks) == 3


def test_training_script(tmp_path):
    script = runpy.run_path(str(ROOT / "8x4_TD0.py"))
    weights = tmp_path / "weights.bin"
    plot = tmp_path / "scores.png"
    argv = ["--total", "2", "--block", "1", "--play", "alpha=0.1 save=%s" % weights,
            "--evil", "seed=3", "--plot", str(plot)]
    assert script["main"](argv) == 0
    assert [len(t) for t in load_weights(weights)] == [25 ** 4] * 8
    assert plot.exists()


def test_training_script_reports_bad_config(tmp_path):
    script = runpy.run_path(str(ROOT / "8x4_TD0.py"))
    assert script["main"](["--total", "1", "--play", "alpha=fast"]) == 1
    assert script["main"](["--total", "1", "--play", "load=%s" % (tmp_path / "missing.bin")]) == 1


def test_td_learning_rejects_empty_blocks():
    with pytest.raises(ValueError):
        td_learning(RandomPlayer("seed=1"), RandomEnvironment("seed=1"), num_episodes=1, print_interval=0)


def test_training_script_rejects_zero_block():
    script = runpy.run_path(str(ROOT / "8x4_TD0.py"))
    with pytest.raises(SystemExit):
        script["main"](["--total", "1", "--block", "0"])
