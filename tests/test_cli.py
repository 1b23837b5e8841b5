"""
Tests for the command line interface.

Covers:
- argument parsing: subcommands, defaults, required command
- fetch commands: options forwarded to the fetch jobs
- process-biomes, build, validate, lookup, serve end to end on temp files
- exit codes: 0 success, 1 failed gate or error
- failing gate reports printed even with -q
"""

import json

import pytest

from geotiles import cli
from geotiles.geo import encode
from geotiles.ingestion import collector
from geotiles.ingestion.collector import save_records
from geotiles.records import LithologyRecord


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def common_args(tmp_path):
    return [
        "--output-dir", str(tmp_path / "output"),
        "--store", str(tmp_path / "tiles.db"),
        "--mapping", str(tmp_path / "mapping.json"),
        "-q",
    ]


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit) as excinfo:
            cli.build_parser().parse_args([])
        assert excinfo.value.code == 2

    def test_fetch_city_defaults(self):
        args = cli.build_parser().parse_args(["fetch-city-lithology"])
        assert args.max_cities == 200
        assert args.resume is False

    def test_negative_coordinates(self):
        args = cli.build_parser().parse_args(["lookup", "-33.87", "-151.2"])
        assert (args.lat, args.lng) == (-33.87, -151.2)

    def test_process_biomes_source_optional(self):
        assert cli.build_parser().parse_args(["process-biomes"]).source is None


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

class TestFetchCommands:
    def test_fetch_lithology_forwards_options(self, tmp_path, monkeypatch):
        calls = []
        monkeypatch.setattr(
            collector, "fetch_lithology",
            lambda config, resume: calls.append((config, resume)),
        )
        assert cli.main(["fetch-lithology", "--resume", *common_args(tmp_path)]) == 0
        config, resume = calls[0]
        assert resume is True
        assert config.output_dir == str(tmp_path / "output")
        assert config.verbose is False

    def test_fetch_city_lithology_forwards_options(self, tmp_path, monkeypatch):
        calls = []
        monkeypatch.setattr(
            collector, "fetch_city_lithology",
            lambda config, resume, max_cities: calls.append((resume, max_cities)),
        )
        assert cli.main(["fetch-city-lithology", "--max-cities", "5", *common_args(tmp_path)]) == 0
        assert calls == [(False, 5)]


class TestProcessBiomes:
    def test_from_geojson(self, tmp_path):
        source = tmp_path / "eco.geojson"
        source.write_text(json.dumps({"type": "FeatureCollection", "features": [{
            "type": "Feature",
            "properties": {"BIOME_NUM": 13},
            "geometry": {"type": "Polygon", "coordinates": [[[20, 20], [21, 20], [21, 21], [20, 21], [20, 20]]]},
        }]}))
        assert cli.main(["process-biomes", str(source), *common_args(tmp_path)]) == 0
        data = json.loads((tmp_path / "output" / "biomes_raw.json").read_text())
        assert data["records"]
        assert all(len(r["cell_id"]) == 4 for r in data["records"])

    def test_missing_source(self, tmp_path, capsys):
        assert cli.main(["process-biomes", str(tmp_path / "nope.geojson"), *common_args(tmp_path)]) == 1
        assert "Error:" in capsys.readouterr().err


class TestBuildAndValidate:
    def test_build_then_validate(self, tmp_path, capsys):
        output = tmp_path / "output"
        output.mkdir()
        records = [LithologyRecord(encode(10.0, 10.0 + i * 0.4, 4), 10.0, 10.0, "granite", (), 0.6) for i in range(3)]
        save_records(str(output / "lithology_raw.json"), records, {})
        (tmp_path / "mapping.json").write_text(json.dumps({"granite": ["granite"]}))

        assert cli.main(["build", "--skip-validation", *common_args(tmp_path)]) == 0
        assert (tmp_path / "tiles.db").exists()

        # No major city has data, so the coverage gate fails
        assert cli.main(["validate", *common_args(tmp_path)]) == 1
        out = capsys.readouterr().out
        assert "[FAIL] Major Cities Lithology Quality" in out
        assert "[PASS] Lithology Material Mappings" in out
        assert "Validation FAILED" in out

    def test_quiet_failing_build_prints_report(self, tmp_path, capsys):
        output = tmp_path / "output"
        output.mkdir()
        records = [LithologyRecord(encode(10.0, 10.0, 4), 10.0, 10.0, "granite", (), 0.6)]
        save_records(str(output / "lithology_raw.json"), records, {})
        (tmp_path / "mapping.json").write_text(json.dumps({"granite": ["granite"]}))

        assert cli.main(["build", *common_args(tmp_path)]) == 1
        captured = capsys.readouterr()
        assert "[FAIL] Major Cities Lithology Quality" in captured.out
        assert "Validation FAILED" in captured.out
        assert "Quality gates failed: Major Cities Lithology Quality" in captured.err
        assert not (tmp_path / "tiles.db").exists()

    def test_build_without_data(self, tmp_path, capsys):
        assert cli.main(["build", *common_args(tmp_path)]) == 1
        assert "No raw data" in capsys.readouterr().err

    def test_validate_missing_store(self, tmp_path):
        assert cli.main(["validate", *common_args(tmp_path)]) == 1


class TestLookup:
    def test_prints_json(self, store_path, capsys):
        assert cli.main(["lookup", "40.7128", "-74.006", "--store", store_path]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["data_source"] == "detailed"
        assert data["geology"]["primary_lithology"] == "granite"

    def test_missing_store(self, tmp_path, capsys):
        assert cli.main(["lookup", "0", "0", "--store", str(tmp_path / "missing.db")]) == 1
        assert "Tile store not found" in capsys.readouterr().err

    def test_out_of_range(self, store_path):
        assert cli.main(["lookup", "95", "0", "--store", store_path]) == 1


class TestServe:
    def test_forwards_host_and_port(self, tmp_path, monkeypatch):
        from geotiles import server

        calls = []
        monkeypatch.setattr(server, "run_server", lambda **kwargs: calls.append(kwargs))
        assert cli.main(["serve", "--host", "127.0.0.1", "--port", "9000", *common_args(tmp_path)]) == 0
        assert calls == [{"host": "127.0.0.1", "port": 9000, "store_path": str(tmp_path / "tiles.db")}]
