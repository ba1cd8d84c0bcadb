"""Tests for the command-line interface."""

import pytest
from click.testing import CliRunner

from entity_synth.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def snapshot_file(tmp_path, library_catalog):
    path = tmp_path / "library.yaml"
    library_catalog.to_yaml(path)
    return path


class TestGenerateCommand:
    """Tests for `entity_synth generate`."""

    def test_generate_from_snapshot(self, runner, tmp_path, snapshot_file):
        out = tmp_path / "models"
        result = runner.invoke(cli, [
            "generate", "--snapshot", str(snapshot_file), "--output_dir", str(out),
        ])

        assert result.exit_code == 0, result.output
        assert (out / "Author.model.ts").exists()
        assert (out / "Book.model.ts").exists()
        assert (out / "init-models.ts").exists()
        assert (out / "manifest.json").exists()
        assert "Generated Entities" in result.output

    def test_dangling_reference_exits_non_zero(self, runner, tmp_path, make_catalog, library_tables):
        library_tables[1]["foreign_keys"].append(
            {"source_column": "title", "target_table": "series"}
        )
        path = tmp_path / "broken.yaml"
        make_catalog(library_tables).to_yaml(path)
        out = tmp_path / "models"

        result = runner.invoke(cli, [
            "generate", "--snapshot", str(path), "--output_dir", str(out),
        ])

        assert result.exit_code == 1
        assert "Error" in result.output
        assert not out.exists()

    def test_live_catalog_requires_database(self, runner, tmp_path):
        result = runner.invoke(cli, ["generate", "--output_dir", str(tmp_path / "models")])

        assert result.exit_code == 1
        assert "database" in result.output


class TestInspectCommand:
    """Tests for `entity_synth inspect`."""

    def test_lists_relationships(self, runner, snapshot_file):
        result = runner.invoke(cli, ["inspect", "--snapshot", str(snapshot_file)])

        assert result.exit_code == 0, result.output
        assert "Inferred Relationships" in result.output
        assert "belongsTo" in result.output

    def test_no_foreign_keys(self, runner, tmp_path, make_catalog):
        path = tmp_path / "flat.yaml"
        make_catalog([{"name": "setting", "columns": [{"name": "key", "raw_type": "varchar(64)"}]}]).to_yaml(path)

        result = runner.invoke(cli, ["inspect", "--snapshot", str(path)])

        assert result.exit_code == 0
        assert "No foreign keys found." in result.output


class TestSnapshotCommand:
    """Tests for `entity_synth snapshot`."""

    def test_resaves_snapshot(self, runner, tmp_path, snapshot_file):
        copy = tmp_path / "nested" / "copy.yaml"
        result = runner.invoke(cli, [
            "snapshot", "--snapshot", str(snapshot_file), "--output", str(copy),
        ])

        assert result.exit_code == 0, result.output
        assert copy.exists()
        assert "Saved 2 tables" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output
