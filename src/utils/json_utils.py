"""
JSONシリアライズ関連のユーティリティ

ボイス割り当て結果（NumPy配列の表や to_dict() を持つ結果オブジェクト）を
JSONとして書き出すためのエンコーダーと関数を提供します。
"""

import json
from pathlib import Path
from typing import Any, Optional, Union

import numpy as np


class NumpyEncoder(json.JSONEncoder):
    """
    NumPy配列・スカラー、Path、to_dict() を持つ結果オブジェクトを変換するエンコーダー

    Examples
    --------
    >>> import json
    >>> import numpy as np
    >>> from src.utils.json_utils import NumpyEncoder
    >>> data = {'detunings': np.array([0.0, 701.955])}
    >>> json.dumps(data, cls=NumpyEncoder)
    '{"detunings": [0.0, 701.955]}'
    """

    def default(self, obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.bool_):
            return bool(obj)
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, Path):
            return str(obj)
        # VoiceAllocation, AllocationReport, AperiodicWave など
        if callable(getattr(obj, 'to_dict', None)):
            return obj.to_dict()
        return super().default(obj)


def dump_json(data: Any, path: Optional[Union[str, Path]] = None) -> str:
    """
    data を NumpyEncoder で整形済みJSONに変換し、path が指定されていればファイルにも書き出す

    Parameters
    ----------
    data : Any
        変換するデータ
    path : str or Path, optional
        出力先のファイル, by default None

    Returns
    -------
    str
        JSON文字列
    """
    text = json.dumps(data, cls=NumpyEncoder, indent=2, ensure_ascii=False)
    if path is not None:
        with open(path, 'w', encoding='utf-8') as f:
            f.write(text)
    return text
