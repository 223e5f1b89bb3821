"""
Project catalog for landing pages.

Enriches the snapshot's project entries with a display name, description
and accent colour. Quick-links come from the snapshot's suggestedLinks;
a project without any gets a single "Documentation" link to its root.
"""

from typing import Any, Dict, List

from .search.store import ProjectMeta, SearchIndex

DEFAULT_ACCENT_COLOR = "#6f6f6f"


def to_display_name(project_id: str) -> str:
    """
    Title-case a kebab-case project id.

    Examples:
        >>> to_display_name("qiskit-nature")
        'Qiskit Nature'
    """
    return " ".join(w[:1].upper() + w[1:] for w in project_id.split("-"))


def enrich_project(project: ProjectMeta) -> Dict[str, Any]:
    display_name = to_display_name(project.id)
    if project.suggested_links:
        links = [
            {"title": l.title, "url": l.url, "subtitle": l.subtitle}
            for l in project.suggested_links
        ]
    else:
        links = [{
            "title": "Documentation",
            "url": f"{project.base_path}/index.html",
            "subtitle": f"Browse the {display_name} documentation.",
        }]

    return {
        "id": project.id,
        "basePath": project.base_path,
        "isExternal": project.is_external,
        "docCount": project.doc_count,
        "indexedAt": project.indexed_at,
        "displayName": display_name,
        "description": f"Documentation for {display_name} ({project.doc_count} pages indexed).",
        "accentColor": DEFAULT_ACCENT_COLOR,
        "links": links,
    }


def enrich_projects(index: SearchIndex) -> List[Dict[str, Any]]:
    """Enriched projects sorted by id"""
    return [enrich_project(p) for p in sorted(index.projects, key=lambda p: p.id)]
