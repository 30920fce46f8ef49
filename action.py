import enum
from dataclasses import dataclass

from board import ILLEGAL, DIRECTION_NAMES


class ActionKind(enum.Enum):
    NONE = 0
    SLIDE = 1
    PLACE = 2


@dataclass(frozen=True)
class Action:
    kind: ActionKind = ActionKind.NONE
    direction: int = -1  # only for SLIDE
    position: int = -1  # only for PLACE
    tile: int = 0  # exponent, only for PLACE

    @classmethod
    def none(cls):
        return cls()

    @classmethod
    def slide(cls, direction):
        return cls(ActionKind.SLIDE, direction=direction)

    @classmethod
    def place(cls, position, tile):
        return cls(ActionKind.PLACE, position=position, tile=tile)

    def apply(self, board):
        """Apply to the board in place; the no-op action is always ILLEGAL"""
        if self.kind is ActionKind.SLIDE:
            return board.slide(self.direction)
        if self.kind is ActionKind.PLACE:
            return board.place(self.position, self.tile)
        return ILLEGAL

    def __bool__(self):
        return self.kind is not ActionKind.NONE

    def __str__(self):
        if self.kind is ActionKind.SLIDE:
            return "#%s" % DIRECTION_NAMES[self.direction]
        if self.kind is ActionKind.PLACE:
            return "%d@%d" % (1 << self.tile, self.position)
        return "??"
