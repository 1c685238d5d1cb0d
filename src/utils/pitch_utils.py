"""
ピッチ操作関連のユーティリティ関数モジュール

このモジュールでは、周波数比とセント値の変換、周波数比同士のピッチ距離（セント誤差）、
および倍音番号の丸めなど、ボイス割り当てで共通に使う計算を提供します。
"""

import math
from typing import Optional, Tuple, Union

import numba
import numpy as np

# 完全一致とみなすセント誤差のしきい値（知覚的な許容誤差とは別物）
EPSILON = 1e-6

CENTS_PER_OCTAVE = 1200.0

# 倍音番号の上限（float64 で整数を正確に表せる範囲）
MAX_HARMONIC = 2.0 ** 53


def cents_to_ratio(cents: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    """
    セント値を周波数比に変換する

    Parameters
    ----------
    cents : float or numpy.ndarray
        セント値

    Returns
    -------
    float or numpy.ndarray
        周波数比
    """
    return 2.0 ** (cents / CENTS_PER_OCTAVE)


def ratio_to_cents(ratio: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    """
    周波数比をセント値に変換する

    比率 1 (デチューンなし) が 0 セントに対応します。

    Parameters
    ----------
    ratio : float or numpy.ndarray
        周波数比

    Returns
    -------
    float or numpy.ndarray
        セント値。0以下の比率に対しては 0 を返します。
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        cents = CENTS_PER_OCTAVE * np.log2(ratio)

    # 無効な値を0に設定
    if isinstance(cents, np.ndarray):
        cents[~np.isfinite(cents)] = 0
    else:
        if not np.isfinite(cents):
            cents = 0.0
        cents = float(cents)

    return cents


def cents_error(a: float, b: float) -> float:
    """
    2つの周波数比の間の知覚的な距離をセントで返す

    ``|1200 * (log2(a) - log2(b))|`` を計算します。対称で、``a == b`` のときに限り 0 になります。

    Parameters
    ----------
    a : float
        周波数比
    b : float
        周波数比

    Returns
    -------
    float
        セント誤差。どちらかが0以下（倍音番号0との比較など）の場合は ``inf``。
    """
    if a <= 0 or b <= 0:
        return math.inf
    # 商ではなく対数の差を取り、引数を入れ替えても符号だけが変わるようにする
    return abs(CENTS_PER_OCTAVE * (math.log2(a) - math.log2(b)))


def round_half_up(value: float) -> int:
    """0.5 を切り上げる丸め（Python組み込みの round は偶数丸めなので使わない）"""
    return int(math.floor(value + 0.5))


def nearest_harmonic(ratio: float, base_ratio: float) -> Optional[int]:
    """
    ratio に最も近い base_ratio の倍音番号

    商が非有限値または MAX_HARMONIC 以上になる場合（比率の桁が大きく離れている場合）は
    どの倍音とも一致しないものとして None を返します。
    """
    quotient = ratio / base_ratio
    if not math.isfinite(quotient) or quotient >= MAX_HARMONIC:
        return None
    return round_half_up(quotient)


# --- Numba accelerated versions --- #


@numba.njit(cache=True)
def cents_to_hz(cents: np.ndarray, reference_hz: float) -> np.ndarray:
    """
    セント値配列を、基準周波数からのデチューンとして周波数（Hz）配列に変換する（Numba用）

    Parameters
    ----------
    cents : numpy.ndarray
        セント値の配列
    reference_hz : float
        0 セントに対応する周波数 (Hz)

    Returns
    -------
    numpy.ndarray
        周波数（Hz）の配列
    """
    if reference_hz <= 0:
        return np.zeros_like(cents, dtype=np.float64)

    return reference_hz * (2.0 ** (cents / 1200.0))


@numba.njit(cache=True)
def nearest_harmonic_errors(
    ratios: np.ndarray, base_ratio: float
) -> Tuple[np.ndarray, np.ndarray]:
    """
    各周波数比に最も近い base_ratio の倍音番号と、そのセント誤差を求める（Numba用）

    Parameters
    ----------
    ratios : numpy.ndarray
        周波数比の配列 (float64)
    base_ratio : float
        ボイスの基本周波数比

    Returns
    -------
    Tuple[numpy.ndarray, numpy.ndarray]
        (倍音番号の配列 (int64), セント誤差の配列 (float64))。
        倍音番号が0になる場合と、商が MAX_HARMONIC 以上または非有限値の場合
        （倍音番号は0として返す）の誤差は ``inf``。
    """
    n = len(ratios)
    harmonics = np.empty(n, dtype=np.int64)
    errors = np.empty(n, dtype=np.float64)
    for i in range(n):
        ratio = ratios[i]
        quotient = ratio / base_ratio
        if not np.isfinite(quotient) or quotient >= MAX_HARMONIC:
            harmonics[i] = 0
            errors[i] = np.inf
            continue
        harmonic = np.int64(np.floor(quotient + 0.5))
        harmonics[i] = harmonic
        if harmonic <= 0 or ratio <= 0:
            errors[i] = np.inf
        else:
            errors[i] = abs(1200.0 * (np.log2(harmonic * base_ratio) - np.log2(ratio)))
    return harmonics, errors
