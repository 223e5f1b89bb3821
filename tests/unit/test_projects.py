"""
Unit tests for base-path resolution.
"""

import json
import logging

from docsearch.pipeline.projects import (
    load_project_info,
    resolve_project,
    resolve_suggested_links,
)


def write_info(project_dir, info):
    project_dir.mkdir(parents=True, exist_ok=True)
    (project_dir / "projectInfo.json").write_text(json.dumps(info), encoding="utf-8")


class TestResolveProject:
    """Test local / external / fallback resolution order"""

    def test_local_entry_page_wins(self, tmp_path):
        """Test that a rendered index.html makes the project local even with an external URL"""
        project_dir = tmp_path / "data" / "alpha"
        write_info(project_dir, {"externalBaseUrl": "https://example.org/alpha"})
        (tmp_path / "public" / "alpha").mkdir(parents=True)
        (tmp_path / "public" / "alpha" / "index.html").write_text("", encoding="utf-8")

        resolved = resolve_project("alpha", project_dir, tmp_path / "public")

        assert resolved.is_external is False
        assert resolved.base_path == "/alpha"
        assert resolved.docs_path == "/alpha"

    def test_external_base_url(self, tmp_path):
        """Test external hosting with trailing slash stripped"""
        project_dir = tmp_path / "data" / "beta"
        write_info(project_dir, {"externalBaseUrl": "https://docs.example.org/beta/"})

        resolved = resolve_project("beta", project_dir, tmp_path / "public")

        assert resolved.is_external is True
        assert resolved.base_path == "https://docs.example.org/beta"
        assert resolved.docs_path == "https://docs.example.org/beta"

    def test_external_docs_path(self, tmp_path):
        """Test that externalDocsPath forms a separate docs path for links"""
        project_dir = tmp_path / "data" / "beta"
        write_info(project_dir, {
            "externalBaseUrl": "https://docs.example.org/beta",
            "externalDocsPath": "/stable/",
        })

        resolved = resolve_project("beta", project_dir, tmp_path / "public")

        assert resolved.base_path == "https://docs.example.org/beta"
        assert resolved.docs_path == "https://docs.example.org/beta/stable"

    def test_fallback_warns(self, tmp_path, caplog):
        """Test fallback to the local convention with a warning, not an error"""
        project_dir = tmp_path / "data" / "gamma"
        project_dir.mkdir(parents=True)

        with caplog.at_level(logging.WARNING):
            resolved = resolve_project("gamma", project_dir, tmp_path / "public")

        assert resolved.is_external is False
        assert resolved.base_path == "/gamma"
        assert "gamma" in caplog.text
        assert "externalBaseUrl" in caplog.text

    def test_suggested_links_absolute(self, tmp_path):
        """Test that quick-link paths are joined with the resolved docs path"""
        project_dir = tmp_path / "data" / "beta"
        write_info(project_dir, {
            "externalBaseUrl": "https://docs.example.org/beta",
            "externalDocsPath": "stable",
            "suggestedLinks": [
                {"title": "API", "path": "/apidocs/index.html", "subtitle": "Reference"},
                {"title": "Home", "path": ""},
            ],
        })

        resolved = resolve_project("beta", project_dir, tmp_path / "public")
        urls = [link.url for link in resolved.suggested_links]

        assert urls == [
            "https://docs.example.org/beta/stable/apidocs/index.html",
            "https://docs.example.org/beta/stable",
        ]
        assert resolved.suggested_links[0].subtitle == "Reference"
        assert resolved.suggested_links[1].subtitle == ""


class TestProjectInfo:
    """Test descriptor loading"""

    def test_absent_descriptor(self, tmp_path):
        assert load_project_info(tmp_path) == {}

    def test_unreadable_descriptor(self, tmp_path, caplog):
        """Test that broken JSON is ignored with a warning"""
        (tmp_path / "projectInfo.json").write_text("{not json", encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            assert load_project_info(tmp_path) == {}
        assert "projectInfo.json" in caplog.text

    def test_no_links_returns_empty_list(self):
        assert resolve_suggested_links({}, "/alpha") == []

    def test_malformed_links_skipped(self):
        links = resolve_suggested_links(
            {"suggestedLinks": ["oops", {"path": "x.html"}, {"title": "Ok", "path": "ok.html"}]},
            "/alpha",
        )
        assert [link.title for link in links] == ["Ok"]
        assert links[0].url == "/alpha/ok.html"
