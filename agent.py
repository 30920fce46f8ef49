import logging
from dataclasses import dataclass

import numpy as np

from action import Action
from approximator import DEFAULT_PATTERNS, NTupleApproximator
from board import DIRECTIONS, ILLEGAL, Board
from config import AgentConfig

logger = logging.getLogger(__name__)


class Agent:
    """
    Common surface of players and environments: a configuration bag plus
    the episode hooks and take_action.
    """

    defaults = ""

    def __init__(self, args=""):
        self.config = AgentConfig.from_string(args, self.defaults)

    def open_episode(self, flag=""):
        pass

    def close_episode(self, flag=""):
        pass

    def take_action(self, board):
        return Action.none()

    def check_for_win(self, board):
        return False

    @property
    def name(self):
        return self.config.name

    @property
    def role(self):
        return self.config.role

    def property(self, key):
        return self.config.property(key)

    def notify(self, message):
        self.config.update(message)

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


class RandomAgent(Agent):
    """Agent owning its own generator, seeded once from the 'seed' key"""

    def __init__(self, args=""):
        super().__init__(args)
        seed = self.config.seed
        # any integer seed is accepted, wrapped into the generator's 32-bit range
        self._rng = np.random.RandomState(None if seed is None else seed % 2 ** 32)


@dataclass
class Step:
    reward: int
    after: Board


class TDPlayer(Agent):
    """
    Greedy player over an n-tuple network: picks the move maximizing
    reward + V(afterstate), records the afterstates of the episode and
    learns from them with a backward TD(0) pass in close_episode.

    Keys: alpha (learning rate, 0 disables learning), init (zeroed tables),
    load (tables from a weight file, wins over init), save (weight file
    written on close).
    """

    defaults = "name=dummy role=player"

    def __init__(self, args="", patterns=DEFAULT_PATTERNS):
        super().__init__(args)
        if self.config.load is not None:
            self.approximator = NTupleApproximator.load(self.config.load, patterns)
        else:
            self.approximator = NTupleApproximator(patterns)
        self.history = []

    @property
    def alpha(self):
        return self.config.alpha

    def estimate_value(self, after):
        return self.approximator.estimate_value(after)

    def adjust_value(self, after, target):
        return self.approximator.adjust_value(after, target, self.alpha)

    def take_action(self, before):
        best_op = None
        best_score = -float('inf')
        best_step = None
        for op in DIRECTIONS:
            after = before.copy()
            reward = after.slide(op)
            if reward == ILLEGAL:
                continue
            score = reward + self.estimate_value(after)
            # strict comparison keeps the first direction among ties
            if score > best_score:
                best_op = op
                best_score = score
                best_step = Step(reward, after)

        if best_op is None:
            return Action.none()
        self.history.append(best_step)
        return Action.slide(best_op)

    def open_episode(self, flag=""):
        self.history.clear()

    def close_episode(self, flag=""):
        if not self.history or self.alpha == 0:
            return
        # the last afterstate is treated as terminal, its target is 0
        self.adjust_value(self.history[-1].after, 0)
        # later afterstates are already updated when earlier targets read them
        for t in range(len(self.history) - 2, -1, -1):
            following = self.history[t + 1]
            target = following.reward + self.estimate_value(following.after)
            self.adjust_value(self.history[t].after, target)

    def close(self):
        if self.config.save is not None:
            self.approximator.save(self.config.save)


class RandomEnvironment(RandomAgent):
    """
    Adds a new random tile to an empty cell
    2-tile: 90%
    4-tile: 10%
    """

    defaults = "name=random role=environment"

    def __init__(self, args=""):
        super().__init__(args)
        self.space = np.arange(16)

    def take_action(self, after):
        self._rng.shuffle(self.space)
        for pos in self.space:
            if after(pos) != 0:
                continue
            tile = 1 if self._rng.randint(0, 10) else 2
            return Action.place(int(pos), tile)
        return Action.none()


class RandomPlayer(RandomAgent):
    """Selects a legal move uniformly at random, never learns"""

    defaults = "name=dummy role=player"

    def __init__(self, args=""):
        super().__init__(args)
        self.opcode = list(DIRECTIONS)

    def take_action(self, before):
        self._rng.shuffle(self.opcode)
        for op in self.opcode:
            if before.copy().slide(op) != ILLEGAL:
                return Action.slide(op)
        return Action.none()


AGENTS = {
    "td": TDPlayer,
    "random": RandomPlayer,
    "environment": RandomEnvironment,
}


def make_agent(kind, args=""):
    try:
        cls = AGENTS[kind]
    except KeyError:
        raise ValueError("unknown agent kind %r, expected one of %s" % (kind, sorted(AGENTS))) from None
    agent = cls(args)
    logger.debug("Created %s agent name=%s role=%s", kind, agent.name, agent.role)
    return agent
