import numpy as np
import pytest

from approximator import (
    BASE, DEFAULT_PATTERNS, NTupleApproximator, decode_feature, extract_feature,
)
from board import Board


def test_feature_is_base_25_packing():
    b = Board([1, 2, 3, 4] + [0] * 12)
    assert extract_feature(b, [0, 1, 2, 3]) == 1 * 25 ** 3 + 2 * 25 ** 2 + 3 * 25 + 4
    assert extract_feature(b, [3, 2, 1, 0]) == 4 * 25 ** 3 + 3 * 25 ** 2 + 2 * 25 + 1
    assert extract_feature(Board([24] * 16), [0, 1, 2, 3]) == 25 ** 4 - 1


def test_feature_decodes_back_to_cells():
    rng = np.random.RandomState(7)
    for _ in range(200):
        b = Board(rng.randint(0, BASE, size=16))
        for pattern in DEFAULT_PATTERNS:
            code = extract_feature(b, pattern)
            assert 0 <= code < BASE ** 4
            assert decode_feature(code, len(pattern)) == [b(i) for i in pattern]


def test_feature_rejects_out_of_range_exponent():
    with pytest.raises(ValueError):
        extract_feature(Board([25] + [0] * 15), [0, 1, 2, 3])


def test_default_network_shape():
    approximator = NTupleApproximator()
    assert len(approximator.weights) == 8
    assert approximator.table_sizes() == [390625] * 8


def test_estimate_is_sum_of_lookups_and_pure():
    approximator = NTupleApproximator()
    b = Board([1, 2, 0, 0, 0, 3] + [0] * 10)
    for i, (table, pattern) in enumerate(zip(approximator.weights, DEFAULT_PATTERNS)):
        table.add(extract_feature(b, pattern), float(i + 1))
    assert approximator.estimate_value(b) == pytest.approx(36.0)
    assert approximator.estimate_value(b) == approximator.estimate_value(b)


@pytest.mark.parametrize("alpha", [0.05, 0.1, 0.2])
def test_adjust_moves_estimate_toward_target(alpha):
    approximator = NTupleApproximator()
    b = Board([1, 1, 2, 0, 3, 0, 0, 0, 0, 4, 0, 0, 5, 0, 0, 1])
    target = 10.0
    before = abs(target - approximator.estimate_value(b))
    approximator.adjust_value(b, target, alpha)
    after = abs(target - approximator.estimate_value(b))
    assert after < before


def test_adjust_applies_the_same_delta_to_every_table():
    approximator = NTupleApproximator()
    b = Board([2, 0, 0, 1] + [0] * 12)
    delta = approximator.adjust_value(b, 16.0, 0.25)
    assert delta == pytest.approx(4.0)
    for table, feature in zip(approximator.weights, approximator.features(b)):
        assert table.get(feature) == pytest.approx(4.0)


def test_custom_patterns():
    approximator = NTupleApproximator(patterns=[[0, 1], [5, 6, 7]])
    assert approximator.table_sizes() == [625, 15625]
    b = Board([1, 2, 0, 0, 0, 3, 0, 1] + [0] * 8)
    assert approximator.features(b) == [1 * 25 + 2, 3 * 625 + 0 * 25 + 1]


def test_mismatched_tables_are_rejected():
    approximator = NTupleApproximator(patterns=[[0, 1]])
    with pytest.raises(ValueError):
        NTupleApproximator(patterns=[[0, 1, 2]], tables=approximator.weights)


def test_save_and_load(tmp_path):
    patterns = [[0, 1], [2, 3]]
    approximator = NTupleApproximator(patterns)
    approximator.adjust_value(Board([1, 2, 3, 4] + [0] * 12), 3.0, 0.5)
    path = tmp_path / "net.bin"
    approximator.save(path)
    loaded = NTupleApproximator.load(path, patterns)
    assert loaded.weights == approximator.weights
