"""
割り当て結果の分析

振幅割り当てには許容誤差による足切りがないため、近似の良し悪しは呼び出し側が
部分音ごとのセント誤差を見て判断する必要があります。このモジュールは割り当てと同じ選択規則で
各部分音の (ボイス, 倍音番号, セント誤差) を求め、統計をまとめます。
"""

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, List, NamedTuple, Sequence

import numpy as np

from src.voice_allocation.amplitude_assigner import match_partials
from src.voice_allocation.result import VoiceAllocation
from src.voice_allocation.validation import validate_amplitudes, validate_spectrum

logger = logging.getLogger(__name__)


class PartialMatch(NamedTuple):
    """1つの部分音がどのセルに割り当てられたか"""
    partial_index: int
    ratio: float
    amplitude: float
    voice_index: int
    harmonic: int
    cents_error: float


@dataclass
class AllocationReport:
    """部分音ごとの割り当てとその誤差の一覧"""
    matches: List[PartialMatch] = field(default_factory=list)
    amplitude_total: float = 0.0
    input_amplitude_total: float = 0.0
    nonzero_cells: int = 0

    @property
    def errors(self) -> np.ndarray:
        return np.array([m.cents_error for m in self.matches], dtype=np.float64)

    @property
    def max_error(self) -> float:
        return float(self.errors.max()) if self.matches else 0.0

    @property
    def mean_error(self) -> float:
        return float(self.errors.mean()) if self.matches else 0.0

    def n_within(self, tolerance: float) -> int:
        """セント誤差が tolerance 未満の部分音の数"""
        return int(np.count_nonzero(self.errors < tolerance))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "matches": [m._asdict() for m in self.matches],
            "max_error": self.max_error,
            "mean_error": self.mean_error,
            "amplitude_total": self.amplitude_total,
            "input_amplitude_total": self.input_amplitude_total,
            "nonzero_cells": self.nonzero_cells,
        }


def analyze_allocation(
    spectrum: Sequence[float],
    amplitudes: Sequence[float],
    allocation: VoiceAllocation,
) -> AllocationReport:
    """
    割り当て結果に対する部分音ごとの誤差レポートを作成する

    Parameters
    ----------
    spectrum : Sequence[float]
        allocate_voices に渡した部分音の周波数比
    amplitudes : Sequence[float]
        allocate_voices に渡した部分音の振幅
    allocation : VoiceAllocation
        allocate_voices の結果

    Returns
    -------
    AllocationReport
        部分音ごとの (ボイス, 倍音番号, セント誤差) と統計
    """
    ratios = validate_spectrum(spectrum)
    values = validate_amplitudes(amplitudes, len(ratios))
    found = match_partials(ratios, allocation.voice_ratios)

    matches = [
        PartialMatch(
            partial_index=i,
            ratio=float(ratios[i]),
            amplitude=float(values[i]),
            voice_index=int(found.voice_indices[i]),
            harmonic=int(found.harmonics[i]),
            cents_error=float(found.errors[i]),
        )
        for i in range(len(ratios))
    ]
    report = AllocationReport(
        matches=matches,
        amplitude_total=allocation.amplitude_total,
        input_amplitude_total=float(values.sum()),
        nonzero_cells=allocation.nonzero_cells(),
    )
    logger.debug("最大誤差 %.4f セント, 平均誤差 %.4f セント", report.max_error, report.mean_error)
    return report
