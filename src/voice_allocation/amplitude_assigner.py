"""
部分音振幅の割り当て

ボイスの基本比率が確定した後、スペクトル全体を走査して各部分音の振幅を
最も誤差の小さい (ボイス, 倍音番号) のセルへ加算し、ボイスごとの密な倍音振幅表を作ります。
この段階には許容誤差による足切りはなく、誤差が大きくても必ずどこかのセルに割り当てます。
"""

import logging
from typing import List, NamedTuple, Sequence

import numpy as np

from src.utils.exception_utils import InvalidInputError
from src.utils.pitch_utils import nearest_harmonic_errors

logger = logging.getLogger(__name__)

# すべてのボイスで誤差が無限大になった場合の割り当て先
FALLBACK_VOICE = 0
FALLBACK_HARMONIC = 1


class HarmonicMatches(NamedTuple):
    """部分音ごとに選ばれた (ボイス, 倍音番号) とそのセント誤差"""
    voice_indices: np.ndarray
    harmonics: np.ndarray
    errors: np.ndarray


def match_partials(spectrum: Sequence[float], voice_ratios: Sequence[float]) -> HarmonicMatches:
    """
    各部分音に最も近い (ボイス, 倍音番号) を選ぶ

    誤差が等しい場合はインデックスの小さい（優先度の高い）ボイスが選ばれます。

    Parameters
    ----------
    spectrum : Sequence[float]
        部分音の周波数比
    voice_ratios : Sequence[float]
        ボイスの基本比率

    Returns
    -------
    HarmonicMatches
        部分音ごとのボイス番号・倍音番号・セント誤差
    """
    ratios = np.asarray(spectrum, dtype=np.float64)
    n_partials = len(ratios)
    if n_partials and len(voice_ratios) == 0:
        raise InvalidInputError("ボイスが1つもないため部分音を割り当てられません")

    # 形状: (n_voices, n_partials)
    columns = [nearest_harmonic_errors(ratios, float(base_ratio)) for base_ratio in voice_ratios]

    voice_indices = np.full(n_partials, FALLBACK_VOICE, dtype=np.int64)
    harmonics = np.full(n_partials, FALLBACK_HARMONIC, dtype=np.int64)
    errors = np.full(n_partials, np.inf, dtype=np.float64)
    for i in range(n_partials):
        least_error = np.inf
        for j, (voice_harmonics, voice_errors) in enumerate(columns):
            if voice_errors[i] < least_error:
                least_error = voice_errors[i]
                voice_indices[i] = j
                harmonics[i] = voice_harmonics[i]
        errors[i] = least_error
    return HarmonicMatches(voice_indices, harmonics, errors)


def _accumulate(table: List[float], harmonic: int, amplitude: float) -> None:
    # 初めて触れる倍音番号まで0で埋めて伸ばす
    if harmonic >= len(table):
        table.extend([0.0] * (harmonic + 1 - len(table)))
    table[harmonic] += amplitude


def assign_amplitudes(
    spectrum: Sequence[float],
    amplitudes: Sequence[float],
    voice_ratios: Sequence[float],
) -> List[np.ndarray]:
    """
    部分音の振幅をボイスの倍音振幅表へ割り当てる

    Parameters
    ----------
    spectrum : Sequence[float]
        部分音の周波数比
    amplitudes : Sequence[float]
        部分音の振幅（spectrum とインデックスが対応）
    voice_ratios : Sequence[float]
        allocate_ratios で確定したボイスの基本比率

    Returns
    -------
    List[np.ndarray]
        ボイスごとの倍音振幅表。インデックスは倍音番号 (0始まり)、
        長さは割り当てられた最大の倍音番号 + 1。
    """
    if len(amplitudes) != len(spectrum):
        raise InvalidInputError(
            f"spectrum と amplitudes の長さが一致しません: {len(spectrum)} != {len(amplitudes)}"
        )
    matches = match_partials(spectrum, voice_ratios)
    tables: List[List[float]] = [[] for _ in voice_ratios]
    for i, amplitude in enumerate(amplitudes):
        if not np.isfinite(matches.errors[i]):
            logger.warning(
                "部分音 %d (比率 %.9g) に近い倍音がないため、ボイス %d の第 %d 倍音に割り当てます",
                i, spectrum[i], FALLBACK_VOICE, FALLBACK_HARMONIC,
            )
        _accumulate(tables[matches.voice_indices[i]], int(matches.harmonics[i]), float(amplitude))
    return [np.asarray(table, dtype=np.float64) for table in tables]
