"""Export remote templates into the local directory layout."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from ..config import ENV_TEMPLATES_PATH
from ..exceptions import ListingUnavailableError
from ..models import RemoteTemplate, TemplateSummary
from ..utils import CONTENT_TYPE_PLAIN, normalize_trailing_newline
from .gateway import RemoteTemplateGateway
from .scanner import (
    CONTENT_HTML_FILE,
    CONTENT_TEXT_FILE,
    META_FILE,
    SUBJECT_FILE,
)

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    """Summary of an export run."""

    count: int
    """Number of remote templates seen (not the number written)"""

    out_dir: Path
    """Resolved output directory"""

    templates: list[RemoteTemplate] = field(default_factory=list)


async def _require_listing(gateway: RemoteTemplateGateway) -> list[RemoteTemplate]:
    templates = await gateway.list_all()
    if templates is None:
        raise ListingUnavailableError(
            "Email template list endpoint is not available (got 404/405). "
            f"Set {ENV_TEMPLATES_PATH} to the correct path for your tenant "
            f"(current: {gateway.email_templates_path})."
        )
    return templates


def is_safe_segment(value: object) -> bool:
    """Whether ``value`` can be used as a single directory name."""
    return (
        isinstance(value, str)
        and value not in (".", "..")
        and "/" not in value
        and "\\" not in value
        and "\0" not in value
    )


def write_template(template: RemoteTemplate, out_dir: Path) -> bool:
    """Write one remote template below ``out_dir``.

    Args:
        template: Remote template
        out_dir: Export root directory

    Returns:
        True if written, False if the entry lacks type, language or details
    """
    details = template.details
    if not template.template_type or not template.language_tag or details is None:
        logger.debug(f"Skipping incomplete remote entry: {template.raw}")
        return False
    if not (
        is_safe_segment(template.template_type)
        and is_safe_segment(template.language_tag)
    ):
        logger.warning(
            f"Skipping remote entry with unsafe type/language: "
            f"{template.template_type!r}/{template.language_tag!r}"
        )
        return False

    template_dir = out_dir / template.template_type / template.language_tag
    template_dir.mkdir(parents=True, exist_ok=True)

    (template_dir / SUBJECT_FILE).write_text(
        normalize_trailing_newline(details.subject), encoding="utf-8"
    )

    content_file = (
        CONTENT_TEXT_FILE
        if details.content_type == CONTENT_TYPE_PLAIN
        else CONTENT_HTML_FILE
    )
    (template_dir / content_file).write_text(
        normalize_trailing_newline(details.content), encoding="utf-8"
    )

    meta = {}
    if details.reply_to:
        meta["replyTo"] = details.reply_to
    if details.send_from:
        meta["sendFrom"] = details.send_from
    if details.content_type:
        meta["contentType"] = details.content_type
    if meta:
        (template_dir / META_FILE).write_text(
            json.dumps(meta, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )
    return True


async def export_templates(
    gateway: RemoteTemplateGateway, out_dir: Union[str, Path]
) -> ExportResult:
    """Download every remote template into ``out_dir``.

    Args:
        gateway: Remote template gateway
        out_dir: Output directory (created if missing)

    Returns:
        ExportResult with the number of remote templates seen

    Raises:
        ListingUnavailableError: If the listing endpoint is not available
    """
    templates = await _require_listing(gateway)
    output_root = Path(out_dir).resolve()
    output_root.mkdir(parents=True, exist_ok=True)

    written = sum(1 for template in templates if write_template(template, output_root))
    logger.debug(f"Wrote {written} of {len(templates)} template(s) to {output_root}")

    return ExportResult(count=len(templates), out_dir=output_root, templates=templates)


async def summarize_templates(
    gateway: RemoteTemplateGateway,
) -> list[TemplateSummary]:
    """List remote templates as summaries (no files are written).

    Raises:
        ListingUnavailableError: If the listing endpoint is not available
    """
    templates = await _require_listing(gateway)
    return [TemplateSummary.from_remote(template) for template in templates]
