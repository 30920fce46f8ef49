import numpy as np

# Directions: 0: up, 1: right, 2: down, 3: left
UP, RIGHT, DOWN, LEFT = 0, 1, 2, 3
DIRECTIONS = (UP, RIGHT, DOWN, LEFT)
DIRECTION_NAMES = ["up", "right", "down", "left"]

ILLEGAL = -1


class Board:
    """
    A 4x4 board of tile exponents (0 is empty, k is the tile 2^k), stored
    row-major so cell i sits at row i // 4, column i % 4.
    """

    size = 4

    def __init__(self, cells=None):
        if cells is None:
            self.cells = np.zeros(self.size * self.size, dtype=np.int32)
        else:
            self.cells = np.array(cells, dtype=np.int32).reshape(self.size * self.size)

    def __call__(self, i):
        return int(self.cells[i])

    def read(self, i):
        return int(self.cells[i])

    def copy(self):
        return Board(self.cells.copy())

    def __eq__(self, other):
        if not isinstance(other, Board):
            return NotImplemented
        return np.array_equal(self.cells, other.cells)

    def grid(self):
        return self.cells.reshape(self.size, self.size)

    def place(self, pos, tile):
        """Put a 2-tile (exponent 1) or 4-tile (exponent 2) on an empty cell"""
        if not 0 <= pos < self.size * self.size:
            return ILLEGAL
        if tile not in (1, 2) or self.cells[pos] != 0:
            return ILLEGAL
        self.cells[pos] = tile
        return 0

    def compress(self, row):
        """Compress the row: move non-zero values to the left"""
        new_row = row[row != 0]
        return np.pad(new_row, (0, self.size - len(new_row)), mode='constant')

    def merge(self, row):
        """Merge adjacent equal exponents in the row, returning the gained score"""
        reward = 0
        for i in range(len(row) - 1):
            if row[i] == row[i + 1] and row[i] != 0:
                row[i] += 1
                row[i + 1] = 0
                reward += 1 << int(row[i])
        return reward

    def slide_line(self, line):
        line = self.compress(line)
        reward = self.merge(line)
        return self.compress(line), reward

    def slide(self, direction):
        """
        Slide every line toward the given direction. Returns the merged
        score, or ILLEGAL (board untouched) when nothing would move.
        """
        grid = self.grid()
        # reorient so the move is always a left slide on rows
        if direction == UP:
            view = grid.T
        elif direction == RIGHT:
            view = grid[:, ::-1]
        elif direction == DOWN:
            view = grid.T[:, ::-1]
        elif direction == LEFT:
            view = grid
        else:
            return ILLEGAL

        moved = view.copy()
        reward = 0
        for i in range(self.size):
            moved[i], line_reward = self.slide_line(view[i])
            reward += line_reward

        if np.array_equal(moved, view):
            return ILLEGAL
        view[:] = moved
        return reward

    apply = slide

    def empty_cells(self):
        return [int(i) for i in np.flatnonzero(self.cells == 0)]

    def max_tile(self):
        top = int(self.cells.max())
        return (1 << top) if top else 0

    def __str__(self):
        lines = []
        for row in self.grid():
            lines.append("".join("%6d" % ((1 << int(v)) if v else 0) for v in row))
        return "\n".join(lines)
