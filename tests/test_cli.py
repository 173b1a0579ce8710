"""
Tests for the CLI module (mine_planner/cli.py).

These tests cover the command-line interface and the run_plan / run_removal functions.
"""

import json

import pytest
from click.testing import CliRunner

from mine_planner.cli import main, run_plan, run_removal, setup_logging

REGION = {"rows": ["xxxxxxx"] * 6, "legend": {"x": "iron-ore"}}


class TestRunPlan:
    """Tests for the run_plan function."""

    def test_plan_json(self):
        success, result, messages = run_plan(REGION, {"strategy": "dense"})
        assert success is True
        data = json.loads(result)
        assert len([p for p in data["placeholders"] if p["kind"] == "unit"]) == 4
        assert data["dropped_count"] == 0

    def test_legacy_settings(self):
        """Older setting names are still understood."""
        success, result, _ = run_plan(REGION, {"placement_mode": "productivity", "belt_orientation": "NS"})
        assert success is True

    def test_blueprint_output(self):
        success, result, _ = run_plan(REGION, {"strategy": "dense"}, use_blueprint=True)
        assert success is True
        assert result.startswith("0")

    def test_empty_region_reported(self):
        region = {"bounds": [0, 0, 5, 5], "points": []}
        success, result, messages = run_plan(region, {})
        assert success is False
        assert result.startswith("empty_region")
        assert messages

    def test_bad_configuration_reported(self):
        success, result, _ = run_plan(REGION, {"max_emitters_per_unit": 40})
        assert success is False
        assert result.startswith("incompatible_configuration")

    def test_malformed_region(self):
        success, result, _ = run_plan({"points": [{"x": 0}]}, {})
        assert success is False
        assert result == "Invalid region description"


class TestRunRemoval:
    def test_finds_planned_placeholders(self):
        _, planned, _ = run_plan(REGION, {"strategy": "dense"})
        world = json.loads(planned)
        world["placeholders"].append(
            {"name": "transport-belt", "kind": "line_segment", "position": {"x": 1, "y": 1}}
        )

        success, result, _ = run_removal(REGION, world)
        assert success is True
        removed = json.loads(result)["placeholders"]
        assert len(removed) == len(world["placeholders"]) - 1

    def test_malformed_world(self):
        success, result, _ = run_removal(REGION, [{"name": "pipe"}])
        assert success is False
        assert result == "Invalid input"


class TestSetupLogging:
    """Tests for logging setup."""

    def test_valid_log_level(self):
        for level in ["debug", "info", "warning", "error"]:
            setup_logging(level)

    def test_invalid_log_level(self):
        with pytest.raises(ValueError):
            setup_logging("invalid_level")


class TestCliMain:
    """Tests for the click commands."""

    @pytest.fixture
    def runner(self):
        return CliRunner()

    @pytest.fixture
    def region_file(self, tmp_path):
        file = tmp_path / "region.json"
        file.write_text(json.dumps(REGION), encoding="utf-8")
        return file

    def test_plan_prints_json(self, runner, region_file):
        result = runner.invoke(main, ["plan", str(region_file), "--strategy", "dense"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["placeholders"]

    def test_plan_with_beacons_to_file(self, runner, region_file, tmp_path):
        output = tmp_path / "out" / "plan.json"
        result = runner.invoke(
            main,
            ["plan", str(region_file), "--emitter", "beacon", "--max-emitters", "2", "-o", str(output)],
        )
        assert result.exit_code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert any(p["kind"] == "emitter" for p in data["placeholders"])

    def test_plan_config_file(self, runner, region_file, tmp_path):
        config = tmp_path / "settings.json"
        config.write_text(json.dumps({"strategy": "dense", "quality": "rare"}), encoding="utf-8")
        result = runner.invoke(main, ["plan", str(region_file), "-c", str(config)])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert {p["quality"] for p in data["placeholders"]} == {"rare"}

    def test_plan_blueprint(self, runner, region_file):
        result = runner.invoke(main, ["plan", str(region_file), "--blueprint", "--label", "Ore"])
        assert result.exit_code == 0
        assert result.stdout.startswith("0")

    def test_plan_failure_exits_nonzero(self, runner, tmp_path):
        region_file = tmp_path / "tiny.json"
        region_file.write_text(
            json.dumps({"rows": ["xx", "xx"], "legend": {"x": "iron-ore"}}), encoding="utf-8"
        )
        result = runner.invoke(main, ["plan", str(region_file)])
        assert result.exit_code == 1

    def test_remove(self, runner, region_file, tmp_path):
        world_file = tmp_path / "world.json"
        result = runner.invoke(main, ["plan", str(region_file), "-o", str(world_file)])
        assert result.exit_code == 0

        result = runner.invoke(main, ["remove", str(region_file), str(world_file)])
        assert result.exit_code == 0
        removed = json.loads(result.stdout)["placeholders"]
        planned = json.loads(world_file.read_text(encoding="utf-8"))["placeholders"]
        assert removed == planned

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.3.0" in result.output
