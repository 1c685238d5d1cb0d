"""
ボイス割り当てモジュール

任意の（非整数倍音を含む）スペクトルを、少数のボイスの倍音列で近似します。
各ボイスは1つの基本周波数比を持ち、その整数倍の倍音で複数の部分音をまとめて表現します。

    >>> from src.voice_allocation import allocate_voices
    >>> detunings, voice_amplitudes = allocate_voices([1, 2, 3], [1.0, 0.5, 0.25], 4, 0.5)
"""

from src.voice_allocation.amplitude_assigner import assign_amplitudes, match_partials
from src.voice_allocation.analysis import AllocationReport, PartialMatch, analyze_allocation
from src.voice_allocation.ratio_allocator import allocate_ratios
from src.voice_allocation.result import VoiceAllocation
from src.voice_allocation.voice_allocator import allocate_voices

__all__ = [
    "AllocationReport",
    "PartialMatch",
    "VoiceAllocation",
    "allocate_ratios",
    "allocate_voices",
    "analyze_allocation",
    "assign_amplitudes",
    "match_partials",
]
