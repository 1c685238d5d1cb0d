"""
ホスト音声エンジン向けの波形記述

ボイス割り当ての結果を、ホスト側の周期波形オシレーター（ボイスごとに1つ）が
そのまま使える倍音係数表に変換します。音声の生成そのものは行いません。
"""

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, List, Sequence

import numpy as np

from src.utils.pitch_utils import cents_to_hz
from src.voice_allocation import VoiceAllocation, allocate_voices

logger = logging.getLogger(__name__)


@dataclass
class PeriodicWaveSpec:
    """
    1ボイス分の周期波形の係数

    real は余弦項、imag は正弦項の係数で、インデックスは倍音番号です。
    位相表は持たず正弦位相で合成するため real はすべて0になります。
    """
    real: np.ndarray
    imag: np.ndarray
    disable_normalization: bool = True

    @classmethod
    def from_harmonic_amplitudes(cls, amplitudes: np.ndarray) -> 'PeriodicWaveSpec':
        imag = np.asarray(amplitudes, dtype=np.float64)
        return cls(real=np.zeros_like(imag), imag=imag)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "real": self.real.tolist(),
            "imag": self.imag.tolist(),
            "disable_normalization": self.disable_normalization,
        }


@dataclass
class AperiodicWave:
    """
    非周期的なスペクトルを、デチューンされた複数の周期波形の和として記述する

    ホストはボイスごとに periodic_waves[i] を波形としたオシレーターを作り、
    detunings[i] セントだけデチューンして出力を足し合わせます。
    """
    detunings: np.ndarray
    periodic_waves: List[PeriodicWaveSpec] = field(default_factory=list)

    @classmethod
    def from_allocation(cls, allocation: VoiceAllocation) -> 'AperiodicWave':
        waves = [PeriodicWaveSpec.from_harmonic_amplitudes(table) for table in allocation.voice_amplitudes]
        return cls(detunings=np.array(allocation.detunings, dtype=np.float64), periodic_waves=waves)

    @classmethod
    def from_spectrum(
        cls,
        spectrum: Sequence[float],
        amplitudes: Sequence[float],
        max_voices: int,
        tolerance: float,
    ) -> 'AperiodicWave':
        """
        スペクトルからボイスを割り当てて波形記述を作る

        Parameters
        ----------
        spectrum : Sequence[float]
            優先度順の部分音の周波数比
        amplitudes : Sequence[float]
            部分音の振幅
        max_voices : int
            ボイス数の上限
        tolerance : float
            許容誤差（セント）

        Returns
        -------
        AperiodicWave
            波形記述
        """
        allocation = allocate_voices(spectrum, amplitudes, max_voices, tolerance)
        logger.debug("AperiodicWave: %d ボイス", allocation.n_voices)
        return cls.from_allocation(allocation)

    @property
    def n_voices(self) -> int:
        return len(self.detunings)

    def voice_frequencies(self, frequency: float, detune: float = 0.0) -> np.ndarray:
        """
        基準周波数 frequency (Hz) で鳴らしたときの各ボイスの基本周波数 (Hz)

        Parameters
        ----------
        frequency : float
            ホストオシレーターの周波数 (Hz)
        detune : float, optional
            全ボイス共通の追加デチューン（セント）, by default 0.0

        Returns
        -------
        np.ndarray
            ボイスごとの周波数 (Hz)
        """
        return cents_to_hz(self.detunings + float(detune), float(frequency))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detunings": self.detunings.tolist(),
            "periodic_waves": [wave.to_dict() for wave in self.periodic_waves],
        }
