from weight import WeightTable, load_weights, save_weights

# Every cell exponent must be below BASE (tiles up to 2^24)
BASE = 25

# 4 rows followed by 4 columns, cells indexed row-major
DEFAULT_PATTERNS = [
    [0, 1, 2, 3],
    [4, 5, 6, 7],
    [8, 9, 10, 11],
    [12, 13, 14, 15],
    [0, 4, 8, 12],
    [1, 5, 9, 13],
    [2, 6, 10, 14],
    [3, 7, 11, 15],
]


def extract_feature(board, pattern, base=BASE):
    """
    Pack the exponents of the pattern's cells into one integer,
    most significant digit first: v0*base^3 + v1*base^2 + v2*base + v3.
    """
    code = 0
    for cell in pattern:
        v = board(cell)
        if not 0 <= v < base:
            raise ValueError("digit %d should be smaller than the base %d" % (v, base))
        code = code * base + v
    return code


def decode_feature(code, length, base=BASE):
    values = []
    for _ in range(length):
        code, v = divmod(code, base)
        values.append(v)
    return values[::-1]


class NTupleApproximator:
    def __init__(self, patterns=DEFAULT_PATTERNS, base=BASE, tables=None):
        """
        Initializes the N-Tuple approximator. 'patterns' is a list of tuples
        of cell indices, each owning one weight table of base^len(pattern)
        entries. 'tables' replaces the zeroed tables, e.g. after loading.
        """
        self.patterns = [list(p) for p in patterns]
        self.base = base
        if tables is None:
            tables = [WeightTable(size) for size in self.table_sizes()]
        elif [len(t) for t in tables] != self.table_sizes():
            raise ValueError("table sizes %s do not match patterns %s"
                             % ([len(t) for t in tables], self.table_sizes()))
        self.weights = tables

    def table_sizes(self):
        return [self.base ** len(p) for p in self.patterns]

    def features(self, board):
        return [extract_feature(board, p, self.base) for p in self.patterns]

    def estimate_value(self, board):
        # Estimate the board value: sum the lookups from all patterns.
        total_value = 0.0
        for table, feature in zip(self.weights, self.features(board)):
            total_value += table.get(feature)
        return total_value

    def adjust_value(self, board, target, alpha):
        """
        Move the estimate of the board toward target. All tables receive the
        same step alpha * (target - estimate). Returns that step.
        """
        features = self.features(board)
        error = target - sum(t.get(f) for t, f in zip(self.weights, features))
        delta = alpha * error
        for table, feature in zip(self.weights, features):
            table.add(feature, delta)
        return delta

    def save(self, path):
        save_weights(path, self.weights)

    @classmethod
    def load(cls, path, patterns=DEFAULT_PATTERNS, base=BASE):
        sizes = [base ** len(p) for p in patterns]
        return cls(patterns, base, tables=load_weights(path, expected_sizes=sizes))
