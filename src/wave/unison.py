"""
ユニゾン（複数ボイスの周波数拡散）のパラメータ計算

ボイス i の周波数は ``frequency + spread * gains[i]`` となるように、ホスト側で
拡散量をボイスごとの係数でスケールして加えます。出力は 1/sqrt(n) で正規化します。
"""

import math

import numpy as np

from src.utils.exception_utils import InvalidInputError


def _check_num_voices(num_voices: int) -> int:
    if isinstance(num_voices, bool) or not isinstance(num_voices, (int, np.integer)):
        raise InvalidInputError(f"num_voices は整数である必要があります: {num_voices!r}")
    if num_voices < 1:
        raise InvalidInputError("At least one voice must be present")
    return int(num_voices)


def unison_spread_gains(num_voices: int) -> np.ndarray:
    """
    ボイスごとの拡散係数を -1 から 1 まで等間隔に並べる

    Parameters
    ----------
    num_voices : int
        ボイス数 (1以上)

    Returns
    -------
    np.ndarray
        係数の配列。ボイスが1つの場合は拡散しないので [0.0]
    """
    n = _check_num_voices(num_voices)
    if n == 1:
        return np.zeros(1, dtype=np.float64)
    return np.array([(2 * i) / (n - 1) - 1 for i in range(n)], dtype=np.float64)


def unison_output_gain(num_voices: int) -> float:
    """ボイス数に応じた出力ゲイン 1/sqrt(n)"""
    return 1.0 / math.sqrt(_check_num_voices(num_voices))


def unison_frequencies(frequency: float, spread: float, num_voices: int) -> np.ndarray:
    """各ボイスの周波数 (Hz) を返す"""
    return float(frequency) + float(spread) * unison_spread_gains(num_voices)
