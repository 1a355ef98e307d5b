"""Directory scanning for local email templates."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from ..exceptions import TemplateStoreError
from ..models import LocalTemplate, TemplateDetails
from ..utils import infer_content_type

logger = logging.getLogger(__name__)

SUBJECT_FILE = "subject.txt"
CONTENT_HTML_FILE = "content.html"
CONTENT_TEXT_FILE = "content.txt"
META_FILE = "meta.json"


def read_text(path: Path) -> str:
    """Read a UTF-8 text file without its trailing whitespace."""
    try:
        return path.read_text(encoding="utf-8").rstrip()
    except (UnicodeDecodeError, OSError) as e:
        raise TemplateStoreError(f"Cannot read {path}: {e}") from e


def read_meta(path: Path) -> dict[str, Any]:
    """Read ``meta.json``; a missing file yields an empty dict."""
    if not path.is_file():
        return {}
    try:
        meta = json.loads(path.read_text(encoding="utf-8"))
    except (ValueError, OSError) as e:
        raise TemplateStoreError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(meta, dict):
        raise TemplateStoreError(f"Expected a JSON object in {path}")
    return meta


class TemplateScanner:
    """Scans a templates directory and builds LocalTemplate records.

    Folder layout::

        <root>/<templateType>/<languageTag>/
            subject.txt
            content.html OR content.txt
            meta.json (optional: contentType, replyTo, sendFrom)

    Examples:
        >>> scanner = TemplateScanner(only_types={"SignIn"})
        >>> templates = scanner.scan_local(Path("templates"))
    """

    def __init__(
        self,
        only_types: Optional[set[str]] = None,
        only_languages: Optional[set[str]] = None,
    ):
        """Initialize template scanner.

        Args:
            only_types: Template types to include (None for all)
            only_languages: Language tags to include (None for all)
        """
        self.only_types = only_types
        self.only_languages = only_languages

    def scan_local(self, root: Path) -> list[LocalTemplate]:
        """Scan ``root`` for template directories.

        Type and language directories are visited in sorted order so that
        the load order is stable across platforms.

        Args:
            root: Templates root directory

        Returns:
            List of LocalTemplate objects in load order

        Raises:
            TemplateStoreError: If the root is missing or a template
                directory is incomplete
        """
        root = root.resolve()
        if not root.is_dir():
            raise TemplateStoreError(f"Templates directory does not exist: {root}")

        templates: list[LocalTemplate] = []
        for type_dir in sorted(root.iterdir()):
            if not type_dir.is_dir():
                continue
            if self.only_types and type_dir.name not in self.only_types:
                continue

            for lang_dir in sorted(type_dir.iterdir()):
                if not lang_dir.is_dir():
                    continue
                if self.only_languages and lang_dir.name not in self.only_languages:
                    continue
                templates.append(self.load_template(lang_dir))

        logger.debug(f"Loaded {len(templates)} template(s) from {root}")
        return templates

    def load_template(self, template_dir: Path) -> LocalTemplate:
        """Load one ``<templateType>/<languageTag>`` directory."""
        subject_path = template_dir / SUBJECT_FILE
        if not subject_path.is_file():
            raise TemplateStoreError(f"Missing {SUBJECT_FILE}: {subject_path}")

        content_path = template_dir / CONTENT_HTML_FILE
        if not content_path.is_file():
            content_path = template_dir / CONTENT_TEXT_FILE
        if not content_path.is_file():
            raise TemplateStoreError(
                f"Missing {CONTENT_HTML_FILE} or {CONTENT_TEXT_FILE} in: {template_dir}"
            )

        meta = read_meta(template_dir / META_FILE)
        details = TemplateDetails(
            subject=read_text(subject_path),
            content=read_text(content_path),
            content_type=meta.get("contentType")
            or infer_content_type(content_path.name),
            reply_to=meta.get("replyTo") or None,
            send_from=meta.get("sendFrom") or None,
        )
        return LocalTemplate(
            template_type=template_dir.parent.name,
            language_tag=template_dir.name,
            details=details,
            source_dir=template_dir,
        )


def load_local_templates(
    templates_dir: Path,
    only_types: Optional[set[str]] = None,
    only_languages: Optional[set[str]] = None,
) -> list[LocalTemplate]:
    """Load all local templates below ``templates_dir``."""
    scanner = TemplateScanner(only_types=only_types, only_languages=only_languages)
    return scanner.scan_local(Path(templates_dir))
