from typer.testing import CliRunner

from chunkeval.cli import app


def test_cli_help() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "run" in result.stdout
    assert "decode" in result.stdout


def test_run_help_lists_options() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["run", "--help"])
    assert result.exit_code == 0
    assert "--num-chunk-types" in result.stdout
    assert "--scheme" in result.stdout
