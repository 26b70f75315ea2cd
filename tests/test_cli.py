"""Tests for CLI entry point."""

from pathlib import Path

import pytest

from conftest import FakeBackend
from orbit import cli
from orbit.core.context import Orbit


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch) -> Path:
    """Point settings at a temp data dir and swap in the fake backend."""
    path = tmp_path / "data"
    monkeypatch.setenv("ORBIT_DATA_DIR", str(path))

    def fake_orbit(settings):
        return Orbit(settings, backend=FakeBackend())

    monkeypatch.setattr("orbit.core.context.Orbit", fake_orbit)
    return path


def test_no_command(data_dir, capsys):
    assert cli.main([]) == 1
    assert "Usage" in capsys.readouterr().out


def test_unknown_command(data_dir, capsys):
    assert cli.main(["fly"]) == 1
    assert "Unknown command: fly" in capsys.readouterr().out


def test_init_creates_data_dir(data_dir, capsys):
    assert cli.main(["init"]) == 0
    assert data_dir.is_dir()


def test_models_lists_registry(data_dir, capsys):
    assert cli.main(["models"]) == 0
    out = capsys.readouterr().out
    assert "text2text-generation" in out
    assert "sentence-transformers/all-MiniLM-L6-v2" in out


def test_missing_text(data_dir, capsys):
    assert cli.main(["ask"]) == 1
    assert "Usage: orbit ask" in capsys.readouterr().out


def test_sentiment(data_dir, capsys):
    assert cli.main(["sentiment", "I", "love", "it"]) == 0
    assert "POSITIVE (0.990)" in capsys.readouterr().out


def test_remember_search_ask(data_dir, capsys):
    assert cli.main(["remember", "Paris is the capital of France."]) == 0
    assert "Stored:" in capsys.readouterr().out

    assert cli.main(["search", "capital", "-k", "1"]) == 0
    out = capsys.readouterr().out
    assert "Paris is the capital of France." in out

    assert cli.main(["--debug", "ask", "What is the capital of France?"]) == 0
    out = capsys.readouterr().out
    assert "Question: What is the capital of France?" in out


def test_search_bad_k(data_dir, capsys):
    assert cli.main(["search", "capital", "-k"]) == 1
    assert "-k expects an integer" in capsys.readouterr().out


def test_parse_top_k():
    assert cli._parse_top_k(["a", "b"], 3) == (["a", "b"], 3)
    assert cli._parse_top_k(["a", "-k", "5", "b"], 3) == (["a", "b"], 5)
