import json

import pytest
import yaml


@pytest.fixture
def spectrum_file(tmp_path):
    """整数倍音でない2つの部分音を持つスペクトルファイル (JSON)"""
    path = tmp_path / "spectrum.json"
    path.write_text(json.dumps({"spectrum": [1.0, 2 ** (4 / 12)], "amplitudes": [1.0, 0.5]}), encoding="utf-8")
    return path


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"allocation": {"max_voices": 1, "tolerance": 0.5}}), encoding="utf-8")
    return path


@pytest.fixture
def output_path(tmp_path):
    return tmp_path / "result.json"
