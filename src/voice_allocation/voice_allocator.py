"""
ボイス割り当てのエントリポイント

入力を検証し、ボイス比率の割り当てと振幅の割り当てを順に実行して、
ボイスごとのデチューン（セント）と倍音振幅表を組み立てます。
"""

import logging
from typing import Sequence

import numpy as np

from src.utils.pitch_utils import ratio_to_cents
from src.voice_allocation.amplitude_assigner import assign_amplitudes
from src.voice_allocation.ratio_allocator import allocate_ratios
from src.voice_allocation.result import VoiceAllocation
from src.voice_allocation.validation import validate_allocation_inputs

logger = logging.getLogger(__name__)


def allocate_voices(
    spectrum: Sequence[float],
    amplitudes: Sequence[float],
    max_voices: int,
    tolerance: float,
) -> VoiceAllocation:
    """
    非整数倍音を含むスペクトルを、限られた数のボイスの倍音列で近似する

    Parameters
    ----------
    spectrum : Sequence[float]
        優先度順の部分音の周波数比（正の値）
    amplitudes : Sequence[float]
        部分音の振幅（spectrum とインデックスが対応）
    max_voices : int
        割り当てるボイス数の上限
    tolerance : float
        許容誤差（セント）

    Returns
    -------
    VoiceAllocation
        ボイスごとのデチューン（セント）と倍音振幅表

    Raises
    ------
    InvalidInputError
        入力が契約に違反している場合（割り当て開始前に送出）
    DegenerateVoiceError
        収縮によってボイスの基本比率が不正になった場合
    """
    ratios, values, max_voices, tolerance = validate_allocation_inputs(
        spectrum, amplitudes, max_voices, tolerance
    )

    voice_ratios = allocate_ratios(ratios, max_voices, tolerance)
    voice_amplitudes = assign_amplitudes(ratios, values, voice_ratios)
    detunings = np.array([ratio_to_cents(ratio) for ratio in voice_ratios], dtype=np.float64)

    logger.debug(
        "%d 個の部分音を %d 個のボイスに割り当てました (max_voices=%d, tolerance=%.3g)",
        len(ratios), len(voice_ratios), max_voices, tolerance,
    )
    return VoiceAllocation(
        detunings=detunings,
        voice_amplitudes=voice_amplitudes,
        voice_ratios=np.asarray(voice_ratios, dtype=np.float64),
    )
