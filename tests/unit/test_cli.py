"""
Unit tests for the docsearch command-line interface.
"""

import json

import pytest

from docsearch import cli
from docsearch.cli import main, render_title


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Keep pytest's logging handlers in place"""
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)


@pytest.fixture
def built_index(tmp_path, docs_tree):
    data_dir, public_dir = docs_tree
    output = tmp_path / "combined.json"
    assert main([
        "build-index",
        "--data-dir", str(data_dir),
        "--public-dir", str(public_dir),
        "--output", str(output),
    ]) == 0
    return output


class TestBuildIndex:

    def test_writes_snapshot(self, built_index):
        snapshot = json.loads(built_index.read_text(encoding="utf-8"))

        assert snapshot["version"] == "1"
        assert [p["id"] for p in snapshot["projects"]] == ["alpha", "beta"]

    def test_nothing_to_build(self, tmp_path):
        data_dir = tmp_path / "data"
        data_dir.mkdir()
        output = tmp_path / "combined.json"

        code = main([
            "build-index",
            "--data-dir", str(data_dir),
            "--public-dir", str(tmp_path / "public"),
            "--output", str(output),
        ])

        assert code == 0
        assert not output.exists()

    def test_malformed_index_aborts(self, tmp_path, docs_tree):
        data_dir, public_dir = docs_tree
        (data_dir / "beta" / "searchindex.js").write_text("Search.setIndex({broken", encoding="utf-8")
        output = tmp_path / "combined.json"

        code = main([
            "build-index",
            "--data-dir", str(data_dir),
            "--public-dir", str(public_dir),
            "--output", str(output),
        ])

        assert code == 1
        assert not output.exists()


class TestSearchCommand:

    def test_prints_ranked_results(self, built_index, capsys):
        code = main(["search", "circuit", "--index", str(built_index), "--project", "alpha"])

        out = capsys.readouterr().out
        assert code == 0
        assert 'Query: "circuit"  [project: alpha]' in out
        assert "Tokens: ['circuit']" in out
        assert "#1" in out
        assert "[Circuit]s & Gates" in out
        assert "url: /alpha/guide/circuits.html" in out
        assert "2 of 2 results" in out

    def test_no_results(self, built_index, capsys):
        code = main(["search", "xylophone", "--index", str(built_index)])

        assert code == 0
        assert "(no results)" in capsys.readouterr().out

    def test_unknown_project(self, built_index):
        assert main(["search", "circuit", "--index", str(built_index), "--project", "missing"]) == 2

    def test_missing_index(self, tmp_path):
        assert main(["search", "circuit", "--index", str(tmp_path / "missing.json")]) == 1

    @pytest.mark.parametrize("limit", ["0", "-3", "five"])
    def test_invalid_limit_is_usage_error(self, built_index, limit, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["search", "circuit", "--index", str(built_index), "--limit", limit])

        assert exc_info.value.code == 2
        assert "--limit" in capsys.readouterr().err


def test_render_title():
    assert render_title("Quantum Kernels", ["kernel"]) == "Quantum [Kernel]s"
    assert render_title("Quantum Kernels", []) == "Quantum Kernels"
