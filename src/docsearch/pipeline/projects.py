"""
Base-path resolution for documentation projects.

Each project is served either locally (rendered HTML under the public
directory) or from an external docs host declared in projectInfo.json.

Resolution order:
1. <public_dir>/<project_id>/index.html exists → local, base path "/<project_id>"
2. projectInfo.json has externalBaseUrl → external, base path = that URL
   (trailing slash stripped), optional externalDocsPath appended for links
3. Otherwise → local convention with a warning (links will likely 404)

projectInfo.json (all fields optional):
    {
        "externalBaseUrl": "https://docs.example.org/nature",
        "externalDocsPath": "stable",
        "suggestedLinks": [{"title": "...", "path": "...", "subtitle": "..."}]
    }
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

PROJECT_INFO_FILENAME = "projectInfo.json"
LOCAL_ENTRY_PAGE = "index.html"


@dataclass(frozen=True)
class SuggestedLink:
    """Curated quick-link with an absolute URL"""
    title: str
    url: str
    subtitle: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "url": self.url, "subtitle": self.subtitle}


@dataclass(frozen=True)
class ResolvedProject:
    """Where a project's pages live and how to link to them"""
    project_id: str
    base_path: str
    docs_path: str
    is_external: bool
    suggested_links: List[SuggestedLink] = field(default_factory=list)


def load_project_info(project_dir: Path) -> Dict[str, Any]:
    """
    Read the optional projectInfo.json descriptor.

    Returns:
        Parsed descriptor, or {} when the file is absent or unreadable
    """
    info_path = project_dir / PROJECT_INFO_FILENAME
    if not info_path.exists():
        return {}

    try:
        info = json.loads(info_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring unreadable {info_path}: {e}")
        return {}

    if not isinstance(info, dict):
        logger.warning(f"Ignoring {info_path}: expected a JSON object")
        return {}
    return info


def _join_url(base: str, path: str) -> str:
    path = path.strip()
    if not path:
        return base
    return f"{base}/{path.lstrip('/')}"


def resolve_suggested_links(info: Dict[str, Any], docs_path: str) -> List[SuggestedLink]:
    """
    Resolve descriptor quick-links to absolute URLs.

    Paths are concatenated with the resolved docs path. Returns [] when the
    descriptor has none; callers substitute a default "Documentation" link.
    """
    links = []
    for raw in info.get("suggestedLinks") or []:
        if not isinstance(raw, dict) or not raw.get("title"):
            logger.debug(f"Skipping malformed suggested link: {raw!r}")
            continue
        links.append(SuggestedLink(
            title=str(raw["title"]),
            url=_join_url(docs_path, str(raw.get("path") or "")),
            subtitle=str(raw.get("subtitle") or ""),
        ))
    return links


def resolve_project(project_id: str, project_dir: Path, public_dir: Path) -> ResolvedProject:
    """
    Decide whether a project is local or external and derive its URL prefix.

    Args:
        project_id: Project slug (directory name)
        project_dir: Directory holding searchindex.js and projectInfo.json
        public_dir: Directory where locally rendered sites are served from

    Returns:
        ResolvedProject with base path, docs path and quick-links
    """
    info = load_project_info(project_dir)
    local_base = f"/{project_id}"

    if (public_dir / project_id / LOCAL_ENTRY_PAGE).exists():
        return ResolvedProject(
            project_id=project_id,
            base_path=local_base,
            docs_path=local_base,
            is_external=False,
            suggested_links=resolve_suggested_links(info, local_base),
        )

    external_base = str(info.get("externalBaseUrl") or "").strip().rstrip("/")
    if external_base:
        docs_path = external_base
        sub_path = str(info.get("externalDocsPath") or "").strip("/")
        if sub_path:
            docs_path = f"{external_base}/{sub_path}"
        logger.info(f"Project '{project_id}' is hosted externally at {docs_path}")
        return ResolvedProject(
            project_id=project_id,
            base_path=external_base,
            docs_path=docs_path,
            is_external=True,
            suggested_links=resolve_suggested_links(info, docs_path),
        )

    logger.warning(
        f"Project '{project_id}' has no local {LOCAL_ENTRY_PAGE} under {public_dir} "
        f"and no externalBaseUrl in {PROJECT_INFO_FILENAME}; falling back to "
        f"{local_base} (links will likely 404)"
    )
    return ResolvedProject(
        project_id=project_id,
        base_path=local_base,
        docs_path=local_base,
        is_external=False,
        suggested_links=resolve_suggested_links(info, local_base),
    )
