import math

import numpy as np
import pytest

from src.utils.pitch_utils import (
    EPSILON,
    MAX_HARMONIC,
    cents_error,
    cents_to_hz,
    cents_to_ratio,
    nearest_harmonic,
    nearest_harmonic_errors,
    ratio_to_cents,
    round_half_up,
)


# --- ratio_to_cents / cents_to_ratio Tests ---


def test_ratio_to_cents_scalar():
    """スカラーの周波数比の変換"""
    assert ratio_to_cents(1.0) == 0.0
    assert np.isclose(ratio_to_cents(2.0), 1200.0)
    assert np.isclose(ratio_to_cents(0.5), -1200.0)
    assert np.isclose(ratio_to_cents(1.5), 701.955, atol=1e-3)  # 純正完全五度


def test_ratio_to_cents_array_invalid_values():
    """0以下の比率は0セントとして扱う"""
    result = ratio_to_cents(np.array([0.0, -1.0, 4.0]))
    np.testing.assert_allclose(result, [0.0, 0.0, 2400.0])


def test_cents_to_ratio_inverse():
    """cents_to_ratio は ratio_to_cents の逆変換"""
    ratios = np.array([0.25, 1.0, 1.272, 3.0])
    np.testing.assert_allclose(cents_to_ratio(ratio_to_cents(ratios)), ratios)


# --- cents_error Tests ---


def test_cents_error_symmetric_and_zero():
    assert cents_error(3.0, 3.0) == 0.0
    assert np.isclose(cents_error(2.0, 1.0), 1200.0)
    assert cents_error(1.5, 1.0) == cents_error(1.0, 1.5)


@pytest.mark.parametrize("a, b", [(1.5, 1.0), (1.272, 3.7), (2 ** (4 / 12), 1e-3), (1e-200, 1e200)])
def test_cents_error_is_bitwise_symmetric(a, b):
    """引数を入れ替えても誤差はビット単位で等しい"""
    assert cents_error(a, b) == cents_error(b, a)


def test_cents_error_non_positive_is_infinite():
    """倍音番号0との比較は無限大の誤差になる"""
    assert cents_error(0.0, 1.0) == math.inf
    assert cents_error(1.0, 0.0) == math.inf
    assert not cents_error(0.0, 1.0) < 1e9


def test_epsilon_is_tiny():
    assert 0 < EPSILON < 1e-3


@pytest.mark.parametrize(
    "value, expected",
    [(0.49, 0), (0.5, 1), (1.5, 2), (2.5, 3), (2.49999, 2), (11.0, 11)],
)
def test_round_half_up(value, expected):
    """0.5 は常に切り上げる（偶数丸めではない）"""
    assert round_half_up(value) == expected


# --- Numba kernels ---


def test_cents_to_hz_reference():
    freqs = cents_to_hz(np.array([0.0, 1200.0, -1200.0]), 440.0)
    np.testing.assert_allclose(freqs, [440.0, 880.0, 220.0])


def test_cents_to_hz_invalid_reference():
    freqs = cents_to_hz(np.array([0.0, 100.0]), 0.0)
    np.testing.assert_array_equal(freqs, [0.0, 0.0])


def test_nearest_harmonic_errors():
    """最も近い倍音番号とその誤差を返す"""
    ratios = np.array([1.0, 2.0, 3.0, 0.2, 2.0 * 2 ** (10 / 1200)])
    harmonics, errors = nearest_harmonic_errors(ratios, 1.0)

    np.testing.assert_array_equal(harmonics, [1, 2, 3, 0, 2])
    np.testing.assert_allclose(errors[:3], [0.0, 0.0, 0.0], atol=1e-9)
    assert np.isinf(errors[3])  # 倍音番号0
    assert np.isclose(errors[4], 10.0)


def test_nearest_harmonic_errors_matches_scalar_metric():
    ratios = np.array([1.272, 1.618, 2.058, 2.618])
    harmonics, errors = nearest_harmonic_errors(ratios, 0.25)
    for ratio, harmonic, error in zip(ratios, harmonics, errors):
        assert harmonic == round_half_up(ratio / 0.25)
        assert np.isclose(error, cents_error(harmonic * 0.25, ratio))


def test_nearest_harmonic():
    assert nearest_harmonic(3.0, 1.0) == 3
    assert nearest_harmonic(2.5, 1.0) == 3
    assert nearest_harmonic(0.2, 1.0) == 0


@pytest.mark.parametrize("ratio, base_ratio", [(1e200, 1e-200), (1e10, 1e-10), (MAX_HARMONIC, 1.0)])
def test_nearest_harmonic_out_of_range(ratio, base_ratio):
    """商が非有限値または表現できる倍音番号を超える場合は None"""
    assert nearest_harmonic(ratio, base_ratio) is None


def test_nearest_harmonic_errors_out_of_range():
    """カーネルも範囲外の商を倍音番号0・誤差無限大として扱う"""
    harmonics, errors = nearest_harmonic_errors(np.array([1e10, 1e200, 1.0]), 1e-10)

    np.testing.assert_array_equal(harmonics[:2], [0, 0])
    assert np.all(np.isinf(errors[:2]))
    assert harmonics[2] == 10 ** 10
    assert errors[2] == pytest.approx(0.0, abs=1e-6)


def test_cents_to_hz_requires_reference():
    """基準周波数に既定値はない"""
    with pytest.raises(TypeError):
        cents_to_hz(np.array([0.0]))
