#!/usr/bin/env python3
"""
ボイス割り当て実行スクリプト

スペクトルファイルを読み込み、限られた数のボイスで近似したときの
ボイスごとのデチューンと倍音振幅表を出力します。

使用例:
    # 基本的な使用方法（結果を標準出力へ）
    python run_allocate.py --spectrum data/bell.yaml

    # 設定ファイルの値を使い、ボイス数だけ上書き
    python run_allocate.py --spectrum data/bell.yaml --config config.yaml --max-voices 6

    # 誤差レポートを含めてファイルに保存
    python run_allocate.py --spectrum data/bell.json --report --output allocation.json

    # 詳細なログを出力
    python run_allocate.py --spectrum data/bell.yaml --log-level DEBUG
"""

import sys

from colorama import init

from src.cli.allocate_cli import main

# カラー出力の初期化
init()

if __name__ == "__main__":
    sys.exit(main())
