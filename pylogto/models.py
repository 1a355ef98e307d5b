"""Data models for email templates."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .utils import CONTENT_TYPE_HTML, make_key


@dataclass(frozen=True)
class TemplateDetails:
    """Subject, body and sender settings of one localized template."""

    subject: str
    content: str
    content_type: Optional[str] = None
    reply_to: Optional[str] = None
    send_from: Optional[str] = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "TemplateDetails":
        """Create TemplateDetails from a ``details`` object of the API."""
        subject = data.get("subject")
        content = data.get("content")
        return cls(
            subject=subject if isinstance(subject, str) else "",
            content=content if isinstance(content, str) else "",
            content_type=data.get("contentType") or None,
            reply_to=data.get("replyTo") or None,
            send_from=data.get("sendFrom") or None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize with API field names, omitting unset optional fields."""
        data: dict[str, Any] = {"subject": self.subject, "content": self.content}
        if self.content_type:
            data["contentType"] = self.content_type
        if self.reply_to:
            data["replyTo"] = self.reply_to
        if self.send_from:
            data["sendFrom"] = self.send_from
        return data


@dataclass(frozen=True)
class LocalTemplate:
    """Template loaded from ``<root>/<templateType>/<languageTag>/``."""

    template_type: str
    language_tag: str
    details: TemplateDetails
    source_dir: Optional[Path] = field(default=None, compare=False)

    @property
    def key(self) -> str:
        return make_key(self.template_type, self.language_tag)

    def to_payload(self) -> dict[str, Any]:
        """Wire representation used by the write endpoints."""
        return {
            "languageTag": self.language_tag,
            "templateType": self.template_type,
            "details": self.details.to_dict(),
        }


@dataclass(frozen=True)
class RemoteTemplate:
    """Template as stored by the tenant.

    ``id`` is None when the record was confirmed from an empty write
    response (the request payload is used in that case).
    """

    template_type: Optional[str]
    language_tag: Optional[str]
    details: Optional[TemplateDetails]
    id: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "RemoteTemplate":
        """Create RemoteTemplate from an API object.

        Missing or malformed fields are kept as None so that callers can
        decide whether to skip the entry.
        """
        details = data.get("details")
        raw_id = data.get("id")
        return cls(
            template_type=data.get("templateType") or None,
            language_tag=data.get("languageTag") or None,
            details=(
                TemplateDetails.from_api_response(details)
                if isinstance(details, dict)
                else None
            ),
            id=str(raw_id) if raw_id not in (None, "") else None,
            raw=data,
        )

    @property
    def key(self) -> Optional[str]:
        if not self.template_type or not self.language_tag:
            return None
        return make_key(self.template_type, self.language_tag)

    def to_dict(self) -> dict[str, Any]:
        """Original API object, falling back to a rebuilt one."""
        if self.raw:
            return dict(self.raw)
        data: dict[str, Any] = {
            "templateType": self.template_type,
            "languageTag": self.language_tag,
        }
        if self.id is not None:
            data["id"] = self.id
        if self.details is not None:
            data["details"] = self.details.to_dict()
        return data


@dataclass
class TemplateSummary:
    """Condensed view of a remote template used by the ``list`` command."""

    id: Optional[str]
    template_type: Optional[str]
    language_tag: Optional[str]
    subject: str = ""
    content_type: str = CONTENT_TYPE_HTML
    has_content: bool = False
    content_length: int = 0
    reply_to: Optional[str] = None
    send_from: Optional[str] = None

    @classmethod
    def from_remote(cls, template: RemoteTemplate) -> "TemplateSummary":
        details = template.details
        if details is None:
            return cls(
                id=template.id,
                template_type=template.template_type,
                language_tag=template.language_tag,
            )
        return cls(
            id=template.id,
            template_type=template.template_type,
            language_tag=template.language_tag,
            subject=details.subject,
            content_type=details.content_type or CONTENT_TYPE_HTML,
            has_content=bool(details.content),
            content_length=len(details.content),
            reply_to=details.reply_to,
            send_from=details.send_from,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "templateType": self.template_type,
            "languageTag": self.language_tag,
            "subject": self.subject,
            "contentType": self.content_type,
            "hasContent": self.has_content,
            "contentLength": self.content_length,
            "replyTo": self.reply_to,
            "sendFrom": self.send_from,
        }
