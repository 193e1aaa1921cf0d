"""
Integration tests for the command line interface.

No engine credentials are set, so translations come back as mock echoes.
"""

import json

import pytest
from loguru import logger
from typer.testing import CliRunner

from cli.commands.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_loguru():
    """The CLI adds a sink on the runner's stderr; drop it after each test."""
    yield
    logger.remove()


@pytest.fixture
def pr_body(tmp_path):
    path = tmp_path / "pr.md"
    path.write_text(
        "Run `npm test` please.\n\n```js\nconst x = 1;\n```\n",
        encoding="utf-8"
    )
    return path


@pytest.fixture
def no_engine_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("translation:\n  engine: lingo\n", encoding="utf-8")
    return path


def test_translate_without_engine_returns_mock(pr_body, no_engine_config, clean_env):
    result = runner.invoke(
        app, ["translate", str(pr_body), "-t", "es", "-s", "en", "-c", str(no_engine_config)]
    )

    assert result.exit_code == 0
    assert "[MOCK en->ES] Run `npm test` please." in result.output
    assert "```js\nconst x = 1;\n```" in result.output


def test_translate_json_output(pr_body, no_engine_config, clean_env):
    result = runner.invoke(
        app, ["translate", str(pr_body), "-t", "fr", "-c", str(no_engine_config), "--json"]
    )

    assert result.exit_code == 0
    assert '"status": "mocked"' in result.output
    assert '"source_lang": "en"' in result.output


def test_translate_to_file(pr_body, no_engine_config, clean_env, tmp_path):
    out = tmp_path / "out.md"
    result = runner.invoke(
        app, ["translate", str(pr_body), "-t", "de", "-s", "en",
              "-c", str(no_engine_config), "-o", str(out)]
    )

    assert result.exit_code == 0
    assert out.read_text(encoding="utf-8").startswith("[MOCK en->DE]")


def test_translate_from_stdin(no_engine_config, clean_env):
    result = runner.invoke(
        app, ["translate", "-", "-t", "es", "-s", "en", "-c", str(no_engine_config)],
        input="Use `git rebase`."
    )

    assert result.exit_code == 0
    assert "`git rebase`" in result.output


def test_translate_missing_file(clean_env, tmp_path):
    result = runner.invoke(app, ["translate", str(tmp_path / "missing.md"), "-t", "es"])

    assert result.exit_code == 1


def test_translate_unknown_engine(pr_body, no_engine_config, clean_env):
    result = runner.invoke(
        app, ["translate", str(pr_body), "-t", "es", "-e", "babelfish", "-c", str(no_engine_config)]
    )

    assert result.exit_code == 1
    assert "Unknown translation engine" in result.output


def test_mask_shows_placeholders(pr_body):
    result = runner.invoke(app, ["mask", str(pr_body)])

    assert result.exit_code == 0
    assert "ZXQ" in result.output
    assert "2 protected spans" in result.output


def test_detect_falls_back_without_engine(pr_body, no_engine_config, clean_env):
    result = runner.invoke(app, ["detect", str(pr_body), "-c", str(no_engine_config)])

    assert result.exit_code == 0
    assert result.output.strip().endswith("en")


def test_engines_lists_all(clean_env):
    result = runner.invoke(app, ["engines"])

    assert result.exit_code == 0
    for name in ("lingo", "libre", "openai"):
        assert name in result.output


def test_detect_unknown_engine(pr_body, no_engine_config, clean_env):
    result = runner.invoke(
        app, ["detect", str(pr_body), "-e", "babelfish", "-c", str(no_engine_config)]
    )

    assert result.exit_code == 1
    assert "Unknown translation engine" in result.output


def test_mask_table_shows_brackets_literally(tmp_path):
    path = tmp_path / "brackets.md"
    path.write_text("Read `arr[i]` and `[bold]x[/bold]`.\n", encoding="utf-8")

    result = runner.invoke(app, ["mask", str(path)])

    assert result.exit_code == 0
    assert "arr[i]" in result.output
    assert "[bold]x[/bold]" in result.output
