import numpy as np
import pytest

from src.utils.pitch_utils import cents_error

# 平均黄金スペクトルの公比
PHI = np.sqrt((np.sqrt(5) + 1) / 2)


@pytest.fixture
def golden_spectrum():
    """比率 phi**i, 振幅 phi**-i の20部分音からなる非整数倍音スペクトル"""
    spectrum = [float(PHI ** i) for i in range(20)]
    amplitudes = [float(PHI ** -i) for i in range(20)]
    return spectrum, amplitudes


@pytest.fixture
def harmonic_spectrum():
    """整数倍音のみのスペクトル"""
    return [1.0, 2.0, 3.0, 4.0, 5.0], [10.0, 9.0, 8.0, 7.0, 6.0]


@pytest.fixture
def cell_matcher():
    """セルに最も近い入力部分音（許容誤差内の最初のもの）を探す関数を返す"""
    def find(spectrum, ratio, harmonic, tolerance):
        for k, partial in enumerate(spectrum):
            if cents_error(ratio * harmonic, partial) < tolerance:
                return k
        return None
    return find
