"""Template comparison logic for sync operations."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models import LocalTemplate, RemoteTemplate

logger = logging.getLogger(__name__)


class SyncAction(str, Enum):
    """Actions that can be taken for a local template during sync."""

    CREATE = "create"
    """Template does not exist remotely"""

    UPDATE = "update"
    """Template exists remotely and is overwritten"""

    UPSERT = "upsert"
    """Remote index unknown, create-or-replace unconditionally"""


@dataclass
class SyncDecision:
    """Represents a decision about how to sync one template."""

    action: SyncAction
    """Action to take"""

    key: str
    """Pairing key ``templateType::languageTag``"""

    local: LocalTemplate
    """Local template"""

    remote: Optional[RemoteTemplate]
    """Matching remote template (if the index knows one)"""

    reason: str
    """Human-readable reason for this decision"""


def build_remote_index(
    remote_templates: list[RemoteTemplate],
) -> dict[str, RemoteTemplate]:
    """Index remote templates by pairing key.

    Entries without a template type or language tag are not indexed.
    """
    index: dict[str, RemoteTemplate] = {}
    for template in remote_templates:
        key = template.key
        if key is None:
            logger.debug(f"Skipping remote entry without type/language: {template.raw}")
            continue
        index[key] = template
    return index


class TemplateComparator:
    """Compares local templates against the remote index."""

    def __init__(self, remote_index: Optional[dict[str, RemoteTemplate]]):
        """Initialize template comparator.

        Args:
            remote_index: Mapping of pairing key to remote template, or None
                when the remote listing is unavailable
        """
        self.remote_index = remote_index

    @property
    def authoritative(self) -> bool:
        """Whether the index came from a successful listing."""
        return self.remote_index is not None

    def compare_templates(
        self, local_templates: list[LocalTemplate]
    ) -> list[SyncDecision]:
        """Determine the action for every local template, in load order.

        Args:
            local_templates: Templates in the order they were loaded

        Returns:
            List of SyncDecision objects, one per local template
        """
        return [self.compare_single(local) for local in local_templates]

    def compare_single(self, local: LocalTemplate) -> SyncDecision:
        key = local.key

        if self.remote_index is None:
            return SyncDecision(
                action=SyncAction.UPSERT,
                key=key,
                local=local,
                remote=None,
                reason="Remote listing unavailable, upserting",
            )

        existing = self.remote_index.get(key)
        if existing is not None:
            return SyncDecision(
                action=SyncAction.UPDATE,
                key=key,
                local=local,
                remote=existing,
                reason="Template exists remotely",
            )

        return SyncDecision(
            action=SyncAction.CREATE,
            key=key,
            local=local,
            remote=None,
            reason="New local template",
        )
