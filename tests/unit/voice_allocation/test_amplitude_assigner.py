import logging

import numpy as np
import pytest

from src.utils.exception_utils import InvalidInputError
from src.voice_allocation.amplitude_assigner import assign_amplitudes, match_partials
from src.voice_allocation.ratio_allocator import allocate_ratios


def test_assigns_to_harmonics_of_single_voice(harmonic_spectrum):
    spectrum, amplitudes = harmonic_spectrum
    tables = assign_amplitudes(spectrum, amplitudes, [1.0])

    assert len(tables) == 1
    np.testing.assert_array_equal(tables[0], [0.0, 10.0, 9.0, 8.0, 7.0, 6.0])


def test_tables_are_dense_with_zero_gaps():
    """割り当てのない倍音は明示的な0で埋まる"""
    tables = assign_amplitudes([1.0, 5.0], [1.0, 0.2], [1.0])
    np.testing.assert_array_equal(tables[0], [0.0, 1.0, 0.0, 0.0, 0.0, 0.2])


def test_picks_voice_with_least_error():
    tables = assign_amplitudes([3.0, 1.25], [1.0, 0.5], [1.0, 1.25])

    np.testing.assert_array_equal(tables[0], [0.0, 0.0, 0.0, 1.0])
    np.testing.assert_array_equal(tables[1], [0.0, 0.5])


def test_tie_goes_to_first_voice():
    """誤差が等しい場合はインデックスの小さいボイスが選ばれる"""
    tables = assign_amplitudes([2.0], [1.0], [1.0, 0.5])

    np.testing.assert_array_equal(tables[0], [0.0, 0.0, 1.0])
    assert len(tables[1]) == 0  # 何も割り当てられなかったボイスの表は空


def test_no_tolerance_gate():
    """誤差が大きくても部分音は必ずどこかのセルに割り当てられる"""
    matches = match_partials([1.26], [1.0])
    assert matches.voice_indices[0] == 0
    assert matches.harmonics[0] == 1
    assert matches.errors[0] == pytest.approx(1200 * np.log2(1.26))

    tables = assign_amplitudes([1.26], [0.7], [1.0])
    np.testing.assert_array_equal(tables[0], [0.0, 0.7])


def test_fallback_when_every_harmonic_is_zero(caplog):
    """どのボイスでも倍音番号が0になる部分音はボイス0の第1倍音に割り当てる"""
    with caplog.at_level(logging.WARNING, logger="src.voice_allocation.amplitude_assigner"):
        tables = assign_amplitudes([1.0], [0.3], [4.0, 8.0])

    np.testing.assert_array_equal(tables[0], [0.0, 0.3])
    assert len(tables[1]) == 0
    assert any("割り当てます" in message for message in caplog.messages)


def test_idempotent_reassignment(golden_spectrum):
    """固定したボイス比率に対して何度割り当てても同じ結果になる"""
    spectrum, amplitudes = golden_spectrum
    voice_ratios = allocate_ratios(spectrum, 6, 0.5)

    first = assign_amplitudes(spectrum, amplitudes, voice_ratios)
    second = assign_amplitudes(spectrum, amplitudes, voice_ratios)
    for a, b in zip(first, second):
        np.testing.assert_array_equal(a, b)


def test_amplitude_is_conserved(golden_spectrum):
    spectrum, amplitudes = golden_spectrum
    voice_ratios = allocate_ratios(spectrum, 3, 0.5)
    tables = assign_amplitudes(spectrum, amplitudes, voice_ratios)

    assert sum(table.sum() for table in tables) == pytest.approx(sum(amplitudes))


def test_negative_amplitudes_accumulate():
    tables = assign_amplitudes([2.0, 2.0], [1.0, -0.25], [1.0])
    np.testing.assert_allclose(tables[0], [0.0, 0.0, 0.75])


def test_requires_a_voice_for_non_empty_spectrum():
    with pytest.raises(InvalidInputError):
        assign_amplitudes([1.0], [1.0], [])
    assert assign_amplitudes([], [], []) == []


def test_length_mismatch():
    with pytest.raises(InvalidInputError):
        assign_amplitudes([1.0, 2.0], [1.0], [1.0])


def test_unrepresentable_harmonic_is_no_match():
    """倍音番号が表現できないほど離れた部分音は誤差が無限大になる"""
    matches = match_partials([1e10, 1e200], [1e-10])

    np.testing.assert_array_equal(matches.voice_indices, [0, 0])
    assert np.all(np.isinf(matches.errors))
