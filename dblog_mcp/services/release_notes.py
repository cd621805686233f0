"""Release notes served as read-only MCP resources.

Documents are markdown files named ``<version>.md`` where the version
looks like ``2026.0.5`` (year, quarter 0-3, running count).

    relnote://index      -> {"versions": ["2026.1.1", "2026.0.5"]}
    relnote://2026.0.5   -> "# 2026.0.5\\n- Fixed transaction retries..."
"""

import re
from pathlib import Path
from typing import List, Optional

from dblog_mcp.lib.logging_config import get_logger
from dblog_mcp.models.error_types import NotFoundError, ValidationError
from dblog_mcp.models.tool_responses import ReleaseNotesIndex

logger = get_logger(__name__)

VERSION_PATTERN = re.compile(r'^\d{4}\.[0-3]\.\d+$')
DEFAULT_NOTES_DIR = Path(__file__).parent.parent / 'release_notes'


def _version_key(version: str) -> tuple:
    return tuple(int(part) for part in version.split('.'))


class ReleaseNotesService:
    """Index and lookup over a directory of release note files."""

    def __init__(self, notes_dir: Optional[Path] = None):
        self.notes_dir = Path(notes_dir) if notes_dir else DEFAULT_NOTES_DIR

    def available_versions(self) -> List[str]:
        """Versions with a document, newest first."""
        if not self.notes_dir.is_dir():
            logger.warning(f"Release notes directory not found: {self.notes_dir}")
            return []

        versions = []
        for path in self.notes_dir.glob('*.md'):
            version = path.stem
            if VERSION_PATTERN.match(version):
                versions.append(version)
            else:
                logger.warning(f"Skipping release note with unexpected filename: {path.name}")

        return sorted(versions, key=_version_key, reverse=True)

    def index(self) -> str:
        """JSON index of available versions."""
        return ReleaseNotesIndex(versions=self.available_versions()).to_json(indent=None)

    def read(self, version: str) -> str:
        """Raw markdown for one version.

        Raises:
            ValidationError: If the version does not match YYYY.<0-3>.<n>
            NotFoundError: If no document exists for the version
        """
        if version is None or not VERSION_PATTERN.match(version):
            raise ValidationError(
                "Version must match YYYY.<quarter>.<count> (e.g., 2026.0.5)",
                field='version'
            )

        path = self.notes_dir / f"{version}.md"
        if not path.is_file():
            raise NotFoundError(f"Release notes not found for version {version}", key=f"relnote://{version}")

        return path.read_text(encoding='utf-8')
