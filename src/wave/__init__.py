"""
ホスト音声エンジン向けのパラメータ計算

オーディオグラフの構築や再生は行わず、ホストがオシレーターに設定する値だけを計算します。
"""

from src.wave.aperiodic_wave import AperiodicWave, PeriodicWaveSpec
from src.wave.unison import unison_frequencies, unison_output_gain, unison_spread_gains

__all__ = [
    "AperiodicWave",
    "PeriodicWaveSpec",
    "unison_frequencies",
    "unison_output_gain",
    "unison_spread_gains",
]
