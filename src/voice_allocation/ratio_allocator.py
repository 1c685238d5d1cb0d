"""
ボイス比率の割り当て

優先度順に並んだ部分音の周波数比から、最大 max_voices 個のボイスの基本比率を貪欲に選びます。
各部分音は、既存ボイスの整数倍（許容誤差内）として説明されるか、既存ボイスの基本比率を
小さな整数で割る「収縮」によって説明可能になるか、新しいボイスの基本比率になります。
"""

import logging
import math
from typing import List, Optional, Sequence

from src.utils.exception_utils import DegenerateVoiceError
from src.utils.pitch_utils import EPSILON, MAX_HARMONIC, cents_error, nearest_harmonic

logger = logging.getLogger(__name__)

# 収縮後の基本比率が元の 1/10 を下回らないようにするための係数
CONTRACTION_FLOOR = 0.1


def _contract(base_ratio: float, ratio: float, tolerance: float) -> Optional[float]:
    """
    base_ratio を整数で割って ratio をその倍音に含められるか探す

    Returns
    -------
    Optional[float]
        収縮後の基本比率。収縮できない場合は None
    """
    # 倍音番号が0になる（決して一致しない）分母は飛ばす
    first_useful = base_ratio / (2.0 * ratio)
    if not math.isfinite(first_useful) or first_useful >= MAX_HARMONIC:
        return None
    denominator = max(2, int(math.floor(first_useful)))
    while base_ratio > CONTRACTION_FLOOR * denominator:
        harmonic = nearest_harmonic(ratio * denominator, base_ratio)
        if harmonic is not None and cents_error(harmonic * base_ratio, ratio * denominator) < tolerance:
            contracted = base_ratio / denominator
            if not math.isfinite(contracted) or contracted <= 0:
                raise DegenerateVoiceError(base_ratio, denominator)
            return contracted
        denominator += 1
    return None


def allocate_ratios(spectrum: Sequence[float], max_voices: int, tolerance: float) -> List[float]:
    """
    スペクトルを近似するボイスの基本比率を割り当てる

    最初の max_voices 個のボイスが埋まるまでは、既存ボイスの倍音としての受け入れを
    ほぼ完全一致 (EPSILON) に限定し、重要な部分音がボイスの基準になるようにします。
    収縮の判定には常に呼び出し側の tolerance を使います。

    Parameters
    ----------
    spectrum : Sequence[float]
        優先度順の部分音の周波数比（正の値）
    max_voices : int
        割り当てるボイス数の上限
    tolerance : float
        許容誤差（セント）

    Returns
    -------
    List[float]
        ボイスの基本比率（作成順）
    """
    voices: List[float] = []
    for index, ratio in enumerate(spectrum):
        ratio = float(ratio)
        effective_tolerance = EPSILON if len(voices) < max_voices else tolerance
        absorbed = False
        for i, base_ratio in enumerate(voices):
            harmonic = nearest_harmonic(ratio, base_ratio)
            if harmonic is not None and cents_error(harmonic * base_ratio, ratio) < effective_tolerance:
                absorbed = True
                break
            contracted = _contract(base_ratio, ratio, tolerance)
            if contracted is not None:
                logger.debug("ボイス %d を収縮: %.9g -> %.9g (部分音 %d, 比率 %.9g)", i, base_ratio, contracted, index, ratio)
                voices[i] = contracted
                absorbed = True
                break
        if absorbed:
            continue
        if len(voices) < max_voices:
            logger.debug("ボイス %d を作成: 比率 %.9g (部分音 %d)", len(voices), ratio, index)
            voices.append(ratio)
        else:
            logger.debug("部分音 %d (比率 %.9g) はボイス比率に反映されませんでした", index, ratio)
    return voices
