"""
例外処理を統一するためのユーティリティモジュール

ボイス割り当て固有の例外クラスと、コマンドラインの境界で例外をログに残すための
関数を提供します。割り当て処理そのものは例外を捕捉せず、呼び出し元へ送出します。

利用例:
```python
from src.utils.exception_utils import log_exception, InvalidInputError

try:
    allocation = allocate_voices(spectrum, amplitudes, max_voices=8, tolerance=0.5)
except InvalidInputError as e:
    log_exception(logger, e, "入力スペクトルが不正です", include_traceback=False)
```
"""

import traceback
import logging
from functools import wraps
from typing import Callable, Optional, Sequence, Type


class AllocatorError(Exception):
    """ボイス割り当て処理の基本となる例外クラス"""
    pass


class InvalidInputError(AllocatorError):
    """
    入力の契約違反（長さの不一致、0以下の比率やボイス数など）

    Attributes
    ----------
    argument : Optional[str]
        違反した引数の名前 ('spectrum', 'amplitudes', 'max_voices', 'tolerance' など)
    """

    def __init__(self, message: str, argument: Optional[str] = None):
        super().__init__(message)
        self.argument = argument


class DegenerateVoiceError(AllocatorError):
    """
    収縮によってボイスの基本比率が0以下または非有限値になった

    Attributes
    ----------
    base_ratio : float
        収縮前の基本比率
    denominator : int
        収縮に使った分母
    """

    def __init__(self, base_ratio: float, denominator: int):
        self.base_ratio = base_ratio
        self.denominator = denominator
        super().__init__(
            f"収縮後の基本比率が不正です: {base_ratio} / {denominator} = {self.contracted_ratio}"
        )

    @property
    def contracted_ratio(self) -> float:
        return self.base_ratio / self.denominator


class ConfigError(AllocatorError):
    """設定ファイル・スペクトルファイル・出力ファイル関連のエラー"""
    pass


def format_exception_message(e: Exception, context: str = "") -> str:
    """
    例外メッセージを整形します。

    InvalidInputError の場合は違反した引数名を併記します。

    Parameters
    ----------
    e : Exception
        例外オブジェクト
    context : str, optional
        追加のコンテキスト情報, by default ""

    Returns
    -------
    str
        整形されたエラーメッセージ
    """
    detail = str(e)
    argument = getattr(e, 'argument', None)
    if argument:
        detail = f"[{argument}] {detail}"
    if context:
        return f"{context}: {detail}"
    return detail


def log_exception(logger: logging.Logger, e: Exception,
                  message: str = "エラーが発生しました",
                  log_level: int = logging.ERROR,
                  include_traceback: bool = True) -> str:
    """
    例外をログに記録し、記録したメッセージを返します。

    Parameters
    ----------
    logger : logging.Logger
        ロガーオブジェクト
    e : Exception
        発生した例外
    message : str, optional
        エラーメッセージのプレフィックス, by default "エラーが発生しました"
    log_level : int, optional
        ログレベル, by default logging.ERROR
    include_traceback : bool, optional
        トレースバックを含めるかどうか, by default True

    Returns
    -------
    str
        ログに記録したメッセージ
    """
    error_msg = format_exception_message(e, message)
    if include_traceback:
        stack_trace = "".join(traceback.format_exception(type(e), e, e.__traceback__))
        error_msg = f"{error_msg}\n{stack_trace}"

    logger.log(log_level, error_msg)
    return error_msg


def wrap_exceptions(
    target_exceptions: Sequence[Type[BaseException]],
    wrapper_exception: Type[AllocatorError],
    message: Optional[str] = None
) -> Callable:
    """
    特定の例外を AllocatorError 系の例外に変換するデコレータを作成します。

    ファイルの読み込みなど、割り当て処理の外側で起こる例外を呼び出し元が
    AllocatorError としてまとめて扱えるようにします。

    Parameters
    ----------
    target_exceptions : Sequence[Type[BaseException]]
        変換する例外クラス
    wrapper_exception : Type[AllocatorError]
        変換後の例外クラス
    message : Optional[str], optional
        変換後のメッセージの接頭辞, by default None（関数名から作成）

    Examples
    --------
    ```python
    @wrap_exceptions([OSError, yaml.YAMLError], ConfigError, "設定ファイルを読み込めません")
    def load_config(path):
        ...
    ```
    """
    targets = tuple(target_exceptions)

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except targets as e:
                prefix = message if message else f"{func.__name__}関数の実行中にエラーが発生しました"
                raise wrapper_exception(f"{prefix}: {e}") from e
        return wrapper
    return decorator
