import pytest
import logging


# ロギング関連の問題を修正するためのフィクスチャ
@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """テスト実行中にロギングの問題が発生しないようにする"""
    root_logger = logging.getLogger()

    # ハンドラがすでに設定されている場合は、それを保持
    handlers = root_logger.handlers.copy()

    yield

    # テスト終了後、ハンドラを復元する
    root_logger.handlers = handlers


@pytest.fixture(autouse=True)
def restore_package_log_level():
    """CLI がパッケージのロガーに設定したレベルをテストごとに元に戻す"""
    names = ("src", "allocate")
    levels = {name: logging.getLogger(name).level for name in names}

    yield

    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)
