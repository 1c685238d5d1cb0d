#!/usr/bin/env python
"""
ボイス割り当てのコマンドラインインターフェース

スペクトルファイル（JSON または YAML、'spectrum' と 'amplitudes' を含む）を読み込み、
ボイスごとのデチューンと倍音振幅表を計算して JSON で出力します。

パラメータの優先順位: コマンドライン引数 > 設定ファイル (config.yaml の allocation セクション) > 既定値
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import tabulate
import yaml
from colorama import Fore, Style, init

from src.utils.exception_utils import (
    AllocatorError,
    ConfigError,
    DegenerateVoiceError,
    log_exception,
    wrap_exceptions,
)
from src.utils.json_utils import dump_json
from src.utils.logging_utils import PACKAGE_LOGGER, configure_logging
from src.voice_allocation import VoiceAllocation, allocate_voices, analyze_allocation

DEFAULT_MAX_VOICES = 8
DEFAULT_TOLERANCE = 0.5  # セント

logger = logging.getLogger('allocate')


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    コマンドライン引数を解析します。

    Returns
    -------
    argparse.Namespace
        解析されたコマンドライン引数
    """
    parser = argparse.ArgumentParser(
        description='非整数倍音スペクトルのボイス割り当て'
    )

    input_group = parser.add_argument_group('入力')
    input_group.add_argument('--spectrum', required=True, help='スペクトルファイルのパス（JSON または YAML）')
    input_group.add_argument('--config', help='設定ファイルのパス（YAML形式）')

    alloc_group = parser.add_argument_group('割り当て')
    alloc_group.add_argument('--max-voices', type=int, help=f'ボイス数の上限（デフォルト: {DEFAULT_MAX_VOICES}）')
    alloc_group.add_argument('--tolerance', type=float, help=f'許容誤差（セント）（デフォルト: {DEFAULT_TOLERANCE}）')

    output_group = parser.add_argument_group('出力')
    output_group.add_argument('--output', help='結果を書き出す JSON ファイル（省略時は標準出力）')
    output_group.add_argument('--report', action='store_true', help='部分音ごとの誤差レポートを含める')

    other_group = parser.add_argument_group('その他')
    other_group.add_argument('--log-level', default='INFO', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], help='ログレベル')
    other_group.add_argument('--log-dir', help='ログファイルの出力ディレクトリ（省略時はコンソールのみ）')

    return parser.parse_args(argv)


def setup_logging(log_level: str, log_dir: Optional[str] = None) -> logging.Logger:
    """
    ロギングを設定します。

    Parameters
    ----------
    log_level : str
        ログレベル
    log_dir : Optional[str], optional
        ログファイルの出力ディレクトリ, by default None

    Returns
    -------
    logging.Logger
        設定されたロガー
    """
    log_file = configure_logging(log_level, log_dir, logger_names=(PACKAGE_LOGGER, logger.name), log_name=logger.name)
    if log_file:
        logger.info(f"ログを {log_file} に出力します")
    return logger


@wrap_exceptions([OSError, yaml.YAMLError], ConfigError, "設定ファイルを読み込めません")
def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    """
    設定ファイルをロードします。

    Parameters
    ----------
    config_path : Optional[str]
        設定ファイルのパス。None の場合は空の設定

    Returns
    -------
    Dict[str, Any]
        設定辞書
    """
    if not config_path:
        return {}
    with open(config_path, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f) or {}
    if not isinstance(config, dict):
        raise ConfigError(f"設定ファイルの形式が不正です: {config_path}")
    return config


@wrap_exceptions([OSError, yaml.YAMLError, json.JSONDecodeError], ConfigError, "スペクトルファイルを読み込めません")
def load_spectrum(spectrum_path: str) -> Tuple[List[float], List[float]]:
    """
    スペクトルファイルから周波数比と振幅を読み込みます。

    Parameters
    ----------
    spectrum_path : str
        'spectrum' と 'amplitudes' のリストを持つ JSON または YAML ファイル

    Returns
    -------
    Tuple[List[float], List[float]]
        (周波数比, 振幅)
    """
    path = Path(spectrum_path)
    with open(path, 'r', encoding='utf-8') as f:
        if path.suffix.lower() == '.json':
            data = json.load(f)
        else:
            data = yaml.safe_load(f)
    if not isinstance(data, dict) or 'spectrum' not in data or 'amplitudes' not in data:
        raise ConfigError(f"'spectrum' と 'amplitudes' が必要です: {spectrum_path}")
    for key in ('spectrum', 'amplitudes'):
        if not isinstance(data[key], list):
            raise ConfigError(f"'{key}' は数値のリストである必要があります: {spectrum_path}")
    return list(data['spectrum']), list(data['amplitudes'])


@wrap_exceptions([OSError], ConfigError, "結果を書き出せません")
def write_output(output: Dict[str, Any], output_path: Optional[str]) -> str:
    """結果をJSONに変換し、output_path が指定されていればファイルに書き出します。"""
    return dump_json(output, output_path)


def resolve_allocation_params(args: argparse.Namespace, config: Dict[str, Any]) -> Tuple[int, float]:
    """
    ボイス数の上限と許容誤差を決定します。

    優先順位:
    1. コマンドライン引数
    2. config.yaml の allocation セクション
    3. 既定値
    """
    section = config.get('allocation') or {}
    if not isinstance(section, dict):
        raise ConfigError("config.yaml の 'allocation' セクションが不正です。")

    max_voices = args.max_voices if args.max_voices is not None else section.get('max_voices', DEFAULT_MAX_VOICES)
    tolerance = args.tolerance if args.tolerance is not None else section.get('tolerance', DEFAULT_TOLERANCE)
    return max_voices, tolerance


def format_voice_table(allocation: VoiceAllocation) -> str:
    """割り当て結果をボイスごとの表にフォーマット"""
    table_data = []
    for i, (detuning, ratio, amplitudes) in enumerate(
        zip(allocation.detunings, allocation.voice_ratios, allocation.voice_amplitudes)
    ):
        table_data.append([
            Fore.CYAN + str(i) + Style.RESET_ALL,
            f"{detuning:.4f}",
            f"{ratio:.6f}",
            len(amplitudes) - 1,
            int(np.count_nonzero(amplitudes)),
        ])
    headers = ["ボイス", "デチューン (セント)", "基本比率", "最高倍音", "使用倍音数"]
    return tabulate.tabulate(table_data, headers=headers, tablefmt="grid")


def main(argv: Optional[List[str]] = None) -> int:
    """
    メイン実行関数
    """
    args = parse_args(argv)
    setup_logging(args.log_level, args.log_dir)

    try:
        config = load_config(args.config)
        spectrum, amplitudes = load_spectrum(args.spectrum)
        max_voices, tolerance = resolve_allocation_params(args, config)
        logger.info(f"{len(spectrum)}個の部分音を最大{max_voices}ボイスに割り当てます (許容誤差 {tolerance} セント)")

        allocation = allocate_voices(spectrum, amplitudes, max_voices, tolerance)
        output: Dict[str, Any] = allocation.to_dict()
        if args.report:
            report = analyze_allocation(spectrum, amplitudes, allocation)
            output['report'] = report
            logger.info(f"最大誤差 {report.max_error:.4f} セント, 許容誤差内 {report.n_within(tolerance)}/{len(spectrum)}")

        logger.info("\n" + format_voice_table(allocation))
        text = write_output(output, args.output)
    except AllocatorError as e:
        # 入力や設定ファイルの誤りはトレースバックなしの1行で報告する
        show_traceback = isinstance(e, DegenerateVoiceError) or logger.isEnabledFor(logging.DEBUG)
        log_exception(logger, e, "ボイス割り当てに失敗しました", include_traceback=show_traceback)
        return 1

    if args.output:
        logger.info(f"結果を {args.output} に保存しました")
    else:
        print(text)

    return 0


if __name__ == "__main__":
    init()
    sys.exit(main())
