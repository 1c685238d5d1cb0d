"""
入力検証

ボイス割り当てに渡される入力の契約（比率と振幅の長さ一致、正の比率、正のボイス数と許容誤差）を
割り当て開始前に検証します。違反は InvalidInputError として即座に呼び出し元へ送出します。
"""

import logging
import numbers
from typing import Sequence, Tuple

import numpy as np

from src.utils.exception_utils import InvalidInputError

logger = logging.getLogger(__name__)


def _as_float_array(values: Sequence[float], name: str) -> np.ndarray:
    try:
        array = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"{name} を数値配列に変換できません: {e}", argument=name) from e
    if array.ndim != 1:
        raise InvalidInputError(f"{name} は1次元の系列である必要があります (ndim={array.ndim})", argument=name)
    return array


def validate_spectrum(spectrum: Sequence[float]) -> np.ndarray:
    """
    部分音の周波数比の系列を検証し、float64配列として返す

    Parameters
    ----------
    spectrum : Sequence[float]
        優先度順に並んだ部分音の周波数比

    Returns
    -------
    np.ndarray
        検証済みの周波数比 (コピー)

    Raises
    ------
    InvalidInputError
        比率に0以下または非有限値が含まれる場合
    """
    ratios = _as_float_array(spectrum, "spectrum")
    invalid = ~np.isfinite(ratios) | (ratios <= 0)
    if np.any(invalid):
        indices = np.where(invalid)[0]
        logger.error("spectrum に正でない、または非有限の比率が含まれています (indices: %s): %s", indices, ratios[indices])
        raise InvalidInputError(
            f"spectrum の比率は正の有限値である必要があります (indices: {indices.tolist()})", argument="spectrum"
        )
    return ratios


def validate_amplitudes(amplitudes: Sequence[float], n_partials: int) -> np.ndarray:
    """部分音の振幅を検証する。長さは spectrum と一致しなければならない。"""
    values = _as_float_array(amplitudes, "amplitudes")
    if len(values) != n_partials:
        logger.error(f"spectrum ({n_partials}) と amplitudes ({len(values)}) の長さが一致しません。")
        raise InvalidInputError(
            f"spectrum と amplitudes の長さが一致しません: {n_partials} != {len(values)}",
            argument="amplitudes",
        )
    if not np.all(np.isfinite(values)):
        indices = np.where(~np.isfinite(values))[0]
        raise InvalidInputError(
            f"amplitudes に非有限値が含まれています (indices: {indices.tolist()})", argument="amplitudes"
        )
    return values


def validate_max_voices(max_voices: int) -> int:
    """ボイス数の上限が正の整数であることを確認する"""
    if isinstance(max_voices, bool) or not isinstance(max_voices, numbers.Integral):
        raise InvalidInputError(f"max_voices は整数である必要があります: {max_voices!r}", argument="max_voices")
    if max_voices <= 0:
        raise InvalidInputError(f"max_voices は正である必要があります: {max_voices}", argument="max_voices")
    return int(max_voices)


def validate_tolerance(tolerance: float) -> float:
    """許容誤差（セント）が正の有限値であることを確認する"""
    if isinstance(tolerance, bool) or not isinstance(tolerance, numbers.Real):
        raise InvalidInputError(f"tolerance は数値である必要があります: {tolerance!r}", argument="tolerance")
    if not np.isfinite(tolerance) or tolerance <= 0:
        raise InvalidInputError(f"tolerance は正の有限値である必要があります: {tolerance}", argument="tolerance")
    return float(tolerance)


def validate_allocation_inputs(
    spectrum: Sequence[float],
    amplitudes: Sequence[float],
    max_voices: int,
    tolerance: float,
) -> Tuple[np.ndarray, np.ndarray, int, float]:
    """
    allocate_voices に渡される全入力をまとめて検証する

    Returns
    -------
    Tuple[np.ndarray, np.ndarray, int, float]
        (spectrum, amplitudes, max_voices, tolerance) の正規化済みの値
    """
    ratios = validate_spectrum(spectrum)
    values = validate_amplitudes(amplitudes, len(ratios))
    return ratios, values, validate_max_voices(max_voices), validate_tolerance(tolerance)
