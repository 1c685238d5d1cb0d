"""
ロギングの設定を統一するためのユーティリティモジュール

コマンドラインから実行するときのログレベルと、必要に応じたログファイルの出力先を設定します。
ライブラリとして使う場合は各モジュールの ``logging.getLogger(__name__)`` だけが使われ、
ハンドラの設定は呼び出し側に任せます。
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Union
from datetime import datetime

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
PACKAGE_LOGGER = 'src'


def parse_log_level(log_level: Union[str, int], default: int = logging.INFO) -> int:
    """
    'DEBUG' などのレベル名または数値をログレベルの数値に変換します。

    不明なレベル名の場合は default を返します。
    """
    if isinstance(log_level, int):
        return log_level
    numeric_level = getattr(logging, str(log_level).upper(), None)
    if not isinstance(numeric_level, int):
        return default
    return numeric_level


def add_file_handler(logger: logging.Logger, output_dir: Union[str, Path], name: str,
                     level: int = logging.INFO) -> Optional[Path]:
    """
    タイムスタンプ付きのログファイルに書き出すハンドラを追加します。

    Parameters
    ----------
    logger : logging.Logger
        ハンドラを追加するロガー
    output_dir : str or Path
        ログファイルの出力ディレクトリ（なければ作成）
    name : str
        ログファイル名の接頭辞
    level : int, optional
        ファイルハンドラのログレベル, by default logging.INFO

    Returns
    -------
    Optional[Path]
        作成したログファイルのパス。作成できなかった場合は None
    """
    try:
        output_path = Path(output_dir).resolve()
        output_path.mkdir(parents=True, exist_ok=True)
        log_file = output_path / f'{name}_{datetime.now().strftime("%Y%m%d_%H%M%S_%f")}.log'

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
    except OSError as e:
        # ファイルに書けなくてもコンソールログは機能するように
        logger.error(f"ログファイルを作成できません ({output_dir}): {e}")
        return None

    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(file_handler)
    return log_file


def configure_logging(log_level: Union[str, int] = 'INFO',
                      output_dir: Optional[Union[str, Path]] = None,
                      logger_names: Iterable[str] = (PACKAGE_LOGGER,),
                      log_name: str = 'allocate') -> Optional[Path]:
    """
    コマンドライン実行用にロギングを設定します。

    ルートロガーにコンソール出力を設定し（既に設定済みなら変更しない）、
    logger_names のロガーのレベルを log_level に揃えます。
    output_dir が指定されていればルートロガーにファイルハンドラも追加します。

    Returns
    -------
    Optional[Path]
        ログファイルのパス（ファイル出力しない場合は None）
    """
    level = parse_log_level(log_level)
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=DATE_FORMAT)
    for name in logger_names:
        logging.getLogger(name).setLevel(level)

    if not output_dir:
        return None
    return add_file_handler(logging.getLogger(), output_dir, log_name, level)
