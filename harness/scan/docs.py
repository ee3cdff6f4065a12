"""Documentation signal detection."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from ..models import DocSignals
from .filesystem import read_text_if_exists
from .git_meta import GitMeta

AGENTS_FILE = "AGENTS.md"
CONTEXT_INDEX_FILE = "docs/context/INDEX.md"
ARCHITECTURE_FILES = ("ARCHITECTURE.md", "docs/ARCHITECTURE.md")
README_FILE = "README.md"

_TRACKED_DOCS = (AGENTS_FILE, CONTEXT_INDEX_FILE, *ARCHITECTURE_FILES, README_FILE)


def detect_docs(root: Path, *, now: datetime, git: GitMeta | None = None) -> DocSignals:
    git = git or GitMeta()
    agents_content = read_text_if_exists(root / AGENTS_FILE)
    readme_content = read_text_if_exists(root / README_FILE) or ""

    return DocSignals(
        has_agents_md=agents_content is not None,
        agents_has_section_header=any(
            line.lstrip().startswith("#") for line in (agents_content or "").splitlines()
        ),
        has_context_index=(root / CONTEXT_INDEX_FILE).exists(),
        has_architecture_doc=any((root / name).exists() for name in ARCHITECTURE_FILES),
        readme_links_architecture="architecture" in readme_content.lower(),
        docs_age_days=git.doc_age_days(root, _TRACKED_DOCS, now),
    )


__all__ = [
    "AGENTS_FILE",
    "ARCHITECTURE_FILES",
    "CONTEXT_INDEX_FILE",
    "README_FILE",
    "detect_docs",
]
