"""
ボイス割り当て結果を表すデータクラス

allocate_voices の出力（ボイスごとのデチューンと倍音振幅表）を、インデックスが揃った形で保持します。
"""

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, Iterator, List

import numpy as np

from src.utils.pitch_utils import cents_to_ratio

logger = logging.getLogger(__name__)


@dataclass
class VoiceAllocation:
    """
    ボイス割り当て結果

    detunings[i]、voice_amplitudes[i]、voice_ratios[i] はすべてボイス i を表します。
    ``detunings, voice_amplitudes = allocation`` のようにタプルとして展開することもできます。
    """
    # ボイスごとのデチューン (セント、比率1 = 0セント) shape=(V,)
    detunings: np.ndarray = field(default_factory=lambda: np.empty(0, dtype=np.float64))

    # ボイスごとの密な倍音振幅表。インデックスは倍音番号
    voice_amplitudes: List[np.ndarray] = field(default_factory=list)

    # ボイスの基本比率 shape=(V,)
    voice_ratios: np.ndarray = field(default_factory=lambda: np.empty(0, dtype=np.float64))

    def __post_init__(self):
        """初期化後にデータの整合性を検証する"""
        self.detunings = np.asarray(self.detunings, dtype=np.float64)
        self.voice_ratios = np.asarray(self.voice_ratios, dtype=np.float64)
        self.voice_amplitudes = [np.asarray(table, dtype=np.float64) for table in self.voice_amplitudes]

        if len(self.detunings) != len(self.voice_amplitudes):
            logger.error(f"detunings ({len(self.detunings)}) と voice_amplitudes ({len(self.voice_amplitudes)}) の長さが一致しません。")
            raise ValueError("detunings と voice_amplitudes の長さが一致しません。")
        if len(self.voice_ratios) != len(self.detunings):
            logger.error(f"voice_ratios ({len(self.voice_ratios)}) と detunings ({len(self.detunings)}) の長さが一致しません。")
            raise ValueError("voice_ratios と detunings の長さが一致しません。")

    def __iter__(self) -> Iterator[Any]:
        yield self.detunings
        yield self.voice_amplitudes

    @property
    def n_voices(self) -> int:
        """割り当てられたボイス数"""
        return len(self.detunings)

    @property
    def amplitude_total(self) -> float:
        """全ボイスの倍音振幅表の総和"""
        return float(sum(table.sum() for table in self.voice_amplitudes))

    def nonzero_cells(self) -> int:
        """振幅が0でない (ボイス, 倍音) セルの数"""
        return int(sum(np.count_nonzero(table) for table in self.voice_amplitudes))

    def to_dict(self) -> Dict[str, Any]:
        """
        結果を辞書形式に変換する

        Returns
        -------
        Dict[str, Any]
            'detunings'、'voice_ratios'、'voice_amplitudes' をリストで持つ辞書
        """
        return {
            "detunings": self.detunings.tolist(),
            "voice_ratios": self.voice_ratios.tolist(),
            "voice_amplitudes": [table.tolist() for table in self.voice_amplitudes],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VoiceAllocation':
        """
        辞書から割り当て結果を作成する

        'voice_ratios' がない場合は 'detunings' から復元します。

        Parameters
        ----------
        data : Dict[str, Any]
            to_dict() 形式の辞書

        Returns
        -------
        VoiceAllocation
            割り当て結果

        Raises
        ------
        ValueError
            必須キーがない場合、または長さが一致しない場合
        """
        missing = [key for key in ("detunings", "voice_amplitudes") if key not in data]
        if missing:
            raise ValueError(f"必須キーがありません: {missing}")
        detunings = np.asarray(data["detunings"], dtype=np.float64)
        voice_ratios = data.get("voice_ratios")
        if voice_ratios is None:
            voice_ratios = cents_to_ratio(detunings)
        return cls(
            detunings=detunings,
            voice_amplitudes=list(data["voice_amplitudes"]),
            voice_ratios=voice_ratios,
        )
