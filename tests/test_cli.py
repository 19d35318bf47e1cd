import pandas as pd
from typer.testing import CliRunner

from bubblepack.cli import app

runner = CliRunner()


def test_pack_explicit_ratios():
    result = runner.invoke(app, ["--ratio", "1", "--ratio", "0.5", "--ratio", "0.2", "--strategy", "iterative", "--seed", "0"])

    assert result.exit_code == 0, result.output
    assert "radius" in result.output
    assert "iterative" in result.output
    assert "overlaps_exist" in result.output


def test_pack_scenario_to_csv(tmp_path):
    output = tmp_path / "circles.csv"
    result = runner.invoke(
        app, ["--scenario", "two-equal", "--strategy", "iterative", "--seed", "1", "--output", str(output)]
    )

    assert result.exit_code == 0, result.output
    frame = pd.read_csv(output)
    assert len(frame) == 2
    assert set(frame.columns) >= {"ratio", "radius", "x", "y", "selected"}


def test_missing_ratios():
    result = runner.invoke(app, [])
    assert result.exit_code != 0


def test_invalid_ratio_exits_with_an_error():
    result = runner.invoke(app, ["--ratio=-1"])

    assert result.exit_code == 1
    assert "Error" in result.output


def test_invalid_dimensions_exit_with_an_error():
    result = runner.invoke(app, ["--ratio", "1", "--width", "0"])
    assert result.exit_code == 1


def test_unknown_scenario():
    result = runner.invoke(app, ["--scenario", "nope"])
    assert result.exit_code == 2
