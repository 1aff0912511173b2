"""Integration tests for CLI commands."""

import json
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from golf_configurator.cli import app
from golf_configurator.database.engine import get_session, init_db, reset_engine
from golf_configurator.database.repository import SelectionRepository
from golf_configurator.models.pydantic_models import Hand, SelectionState


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def test_db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Create a test database."""
    reset_engine()

    db_path = tmp_path / "test.db"
    monkeypatch.setenv("GOLF_CONFIGURATOR_DB_PATH", str(db_path))
    monkeypatch.delenv("DATABASE_URL", raising=False)
    init_db(db_path)
    yield db_path

    reset_engine()


def write_json(path: Path, data: Any) -> Path:
    """Write data as JSON and return the path."""
    path.write_text(json.dumps(data))
    return path


@pytest.fixture
def complete_selection(tmp_path: Path) -> Path:
    """A complete selection file with a shaft upgrade."""
    return write_json(
        tmp_path / "selection.json",
        {
            "hand": "Right",
            "clubs": ["6", "7", "8", "9", "PW", "5"],
            "shaft_brand": "KBS",
            "shaft_flex": "Regular",
            "grip": {"brand": "Golf Pride", "model": "MCC", "size": "Standard"},
        },
    )


class TestVersionAndCatalog:
    """Tests for --version and catalog."""

    def test_version(self, runner: CliRunner) -> None:
        """--version prints the version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "golf-configurator version" in result.stdout

    def test_catalog_json(self, runner: CliRunner) -> None:
        """catalog --json lists the clubs and rules."""
        result = runner.invoke(app, ["catalog", "--json"])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert [club["id"] for club in data["clubs"]] == ["4", "5", "6", "7", "8", "9", "PW"]
        assert data["rules"]["dependencies"] == {"4": ["5"]}

    def test_catalog_table(self, runner: CliRunner) -> None:
        """catalog renders a club table."""
        result = runner.invoke(app, ["catalog"])
        assert result.exit_code == 0
        assert "Pitching Wedge" in result.stdout

    def test_missing_config(self, runner: CliRunner, tmp_path: Path) -> None:
        """A missing config file exits with an error."""
        result = runner.invoke(app, ["catalog", "--config", str(tmp_path / "none.yaml")])
        assert result.exit_code == 1


class TestValidateCommand:
    """Tests for the validate command."""

    def test_valid_selection(self, runner: CliRunner, complete_selection: Path) -> None:
        """A complete selection exits 0."""
        result = runner.invoke(app, ["validate", str(complete_selection), "--json"])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert data["valid"] is True
        assert data["derived"]["iron_set_type"] == "5-PW"

    def test_invalid_selection(self, runner: CliRunner, tmp_path: Path) -> None:
        """An incomplete selection exits 1 with the reason."""
        path = write_json(tmp_path / "s.json", {"hand": "Left", "clubs": ["4", "6", "7", "8", "9", "PW"]})

        result = runner.invoke(app, ["validate", str(path), "--json"])

        assert result.exit_code == 1
        assert json.loads(result.stdout)["reason"] == "Selecting 4-iron requires 5-iron"

    def test_panel_output(self, runner: CliRunner, complete_selection: Path) -> None:
        """Without --json a summary panel is printed."""
        result = runner.invoke(app, ["validate", str(complete_selection)])
        assert result.exit_code == 0
        assert "VALID" in result.stdout

    def test_missing_file(self, runner: CliRunner, tmp_path: Path) -> None:
        """A missing selection file exits 1."""
        result = runner.invoke(app, ["validate", str(tmp_path / "nope.json")])
        assert result.exit_code == 1


class TestBuildLinesAndTransform:
    """Tests for build-lines and transform."""

    def test_build_lines(self, runner: CliRunner, complete_selection: Path) -> None:
        """build-lines prints a tagged submission."""
        result = runner.invoke(
            app,
            [
                "build-lines",
                str(complete_selection),
                "--main-variant", "iron-1",
                "--shaft-variant", "shaft-1",
                "--parent-variant", "parent-1",
                "--bundle-id", "golf-42-abcdefghi",
            ],
        )
        assert result.exit_code == 0

        items = json.loads(result.stdout)["items"]
        assert [item["id"] for item in items] == ["iron-1", "shaft-1"]
        assert items[1]["quantity"] == 6
        assert {item["properties"]["bundleId"] for item in items} == {"golf-42-abcdefghi"}

    def test_build_then_transform(
        self, runner: CliRunner, complete_selection: Path, tmp_path: Path
    ) -> None:
        """Lines built by build-lines consolidate into one merge operation."""
        built = runner.invoke(
            app,
            [
                "build-lines",
                str(complete_selection),
                "--main-variant", "iron-1",
                "--shaft-variant", "shaft-1",
                "--parent-variant", "parent-1",
            ],
        )
        items = json.loads(built.stdout)["items"]
        prices = {"iron-1": "799.00", "shaft-1": "30.00"}
        lines = [
            {
                "id": f"line-{i}",
                "quantity": item["quantity"],
                "unitPrice": prices[item["id"]],
                "properties": item["properties"],
            }
            for i, item in enumerate(items)
        ]
        lines_file = write_json(tmp_path / "lines.json", {"lines": lines})

        result = runner.invoke(app, ["transform", str(lines_file), "--json"])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert data["count"] == 1
        op = data["operations"][0]
        assert op["parentVariantId"] == "parent-1"
        assert op["title"] == "Custom Golf Iron Set - 5-PW with KBS Regular"
        assert float(op["totalPrice"]) == 979.0

    def test_transform_failure(self, runner: CliRunner, tmp_path: Path) -> None:
        """Transform errors exit 1."""
        lines_file = write_json(
            tmp_path / "lines.json",
            [{"id": "A", "quantity": 1, "unitPrice": 1, "metadata": {"bundleId": "b1"}}],
        )

        result = runner.invoke(app, ["transform", str(lines_file), "--json"])

        assert result.exit_code == 1
        assert "Missing required bundle metadata" in json.loads(result.stdout)["error"]

    def test_transform_table(self, runner: CliRunner, tmp_path: Path) -> None:
        """Without bundles a notice is printed."""
        lines_file = write_json(tmp_path / "lines.json", [])

        result = runner.invoke(app, ["transform", str(lines_file)])

        assert result.exit_code == 0
        assert "No bundles found" in result.stdout


class TestDatabaseCommands:
    """Tests for init-database and show-session."""

    def test_init_database(self, runner: CliRunner, tmp_path: Path) -> None:
        """init-database creates the database file."""
        reset_engine()
        db_path = tmp_path / "new.db"

        result = runner.invoke(app, ["init-database", "--db", str(db_path)])
        reset_engine()

        assert result.exit_code == 0
        assert db_path.exists()

    def test_show_session(self, runner: CliRunner, test_db: Path) -> None:
        """show-session prints a saved selection."""
        with get_session() as session:
            SelectionRepository(session).save("abc", SelectionState(hand=Hand.LEFT))

        result = runner.invoke(app, ["show-session", "abc", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["hand"] == "Left"

    def test_show_missing_session(self, runner: CliRunner, test_db: Path) -> None:
        """Unknown sessions exit 1."""
        result = runner.invoke(app, ["show-session", "missing"])
        assert result.exit_code == 1
