"""
Tests for the command line entry point.
"""

import json

import numpy as np
import pytest

import booru_tagger.main as cli
from booru_tagger.errors import ConfigError
from booru_tagger.tagging_engine import TaggerSession
from conftest import FakeEngine, solid_image


def _fake_session(catalog):
    engine = FakeEngine((-1, 4, 4, 3), (-1, 4), lambda row: np.array([0.8, 0.5, 0.9, 0.99]))
    return TaggerSession(engine, catalog)


def test_main_json_output(tmp_path, monkeypatch, capsys, small_catalog):
    image_path = tmp_path / "image.png"
    solid_image(40, size=(8, 6)).save(image_path)
    monkeypatch.setattr(cli, "construct_session", lambda model, tags: _fake_session(small_catalog))

    code = cli.main(["--model", "m.onnx", "--tags", "t.csv", "--json", str(image_path)])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert [entry["path"] for entry in payload] == [str(image_path)]
    result = payload[0]["predictions"]
    assert set(result) == {"rating", "general", "character"}
    assert list(result["general"]) == ["long hair"]
    assert list(result["character"]) == ["hatsune miku"]


def test_main_table_output(tmp_path, monkeypatch, capsys, small_catalog):
    image_path = tmp_path / "image.png"
    solid_image(40).save(image_path)
    monkeypatch.setattr(cli, "construct_session", lambda model, tags: _fake_session(small_catalog))

    assert cli.main(["--model", "m.onnx", "--tags", "t.csv", str(image_path)]) == 0
    assert "long hair" in capsys.readouterr().out


def test_main_session_error(tmp_path, monkeypatch):
    image_path = tmp_path / "image.png"
    solid_image(40).save(image_path)

    def fail(model, tags):
        raise ConfigError(f"Model file not found: {model}")

    monkeypatch.setattr(cli, "construct_session", fail)
    assert cli.main(["--model", "m.onnx", "--tags", "t.csv", str(image_path)]) == 1


def test_main_unreadable_image(tmp_path):
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"not an image")
    assert cli.main(["--model", "m.onnx", "--tags", "t.csv", str(bad)]) == 1


def test_main_requires_model_and_tags(tmp_path, monkeypatch):
    monkeypatch.setattr(cli.settings, "model_path", None)
    image_path = tmp_path / "image.png"
    solid_image(40).save(image_path)
    assert cli.main(["--tags", "t.csv", str(image_path)]) == 1


def test_main_json_keeps_repeated_paths(tmp_path, monkeypatch, capsys, small_catalog):
    image_path = tmp_path / "image.png"
    solid_image(40).save(image_path)
    monkeypatch.setattr(cli, "construct_session", lambda model, tags: _fake_session(small_catalog))

    code = cli.main(["--model", "m.onnx", "--tags", "t.csv", "--json", str(image_path), str(image_path)])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert [entry["path"] for entry in payload] == [str(image_path)] * 2


@pytest.mark.parametrize("value", ["1.5", "-0.1", "high"])
def test_main_rejects_bad_threshold(tmp_path, value):
    image_path = tmp_path / "image.png"
    solid_image(40).save(image_path)
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--model", "m.onnx", "--tags", "t.csv", "--general-threshold", value, str(image_path)])
    assert excinfo.value.code == 2


def test_threshold_type_accepts_bounds():
    assert cli.threshold("0") == 0.0
    assert cli.threshold("1") == 1.0
