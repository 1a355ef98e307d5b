"""Core sync engine for reconciling local templates with the tenant."""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from rich.progress import Progress, SpinnerColumn, TextColumn

from ..exceptions import LogtoAPIError, SyncError
from ..models import LocalTemplate, RemoteTemplate
from ..output import OutputFormatter
from .comparator import (
    SyncAction,
    SyncDecision,
    TemplateComparator,
    build_remote_index,
)
from .gateway import RemoteTemplateGateway, WriteOutcome

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Outcome of applying (or planning) one sync decision."""

    action: SyncAction
    key: str
    local: LocalTemplate
    remote: Optional[RemoteTemplate]
    method: Optional[str] = None
    """HTTP method that succeeded (None under dry-run)"""

    dry_run: bool = False
    error: Optional[str] = None
    """Failure message, only set in continue-on-error mode"""

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "action": self.action.value,
            "key": self.key,
            "local": self.local.to_payload(),
            "remote": self.remote.to_dict() if self.remote else None,
        }
        if self.dry_run:
            data["dryRun"] = True
        else:
            data["request"] = {"method": self.method}
        if self.error is not None:
            data["error"] = self.error
        return data


def categorize_results(results: list[SyncResult]) -> dict[str, int]:
    """Count results per action.

    Args:
        results: Sync results

    Returns:
        Dictionary with ``total``, ``create``, ``update``, ``upsert`` and
        ``failed`` counts
    """
    stats = {
        "total": len(results),
        "create": 0,
        "update": 0,
        "upsert": 0,
        "failed": 0,
    }
    for result in results:
        stats[result.action.value] += 1
        if result.failed:
            stats["failed"] += 1
    return stats


class SyncEngine:
    """Core sync engine that pushes local templates to the tenant.

    Items are processed strictly one after another in load order. The first
    failing item aborts the run unless ``continue_on_error`` is set; writes
    that already succeeded are not rolled back.
    """

    def __init__(
        self,
        gateway: RemoteTemplateGateway,
        output: Optional[OutputFormatter] = None,
        verbose: bool = False,
    ):
        """Initialize sync engine.

        Args:
            gateway: Remote template gateway
            output: Output formatter for displaying progress/status
            verbose: Print every confirmed remote template
        """
        self.gateway = gateway
        self.output = output or OutputFormatter()
        self.verbose = verbose

    async def _fetch_remote_index(self) -> Optional[dict[str, RemoteTemplate]]:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            disable=self.output.quiet or self.output.json_output,
        ) as progress:
            task = progress.add_task("Fetching remote templates...", total=None)
            remote_templates = await self.gateway.list_all()
            if remote_templates is None:
                progress.update(task, description="Remote listing unavailable")
                return None
            progress.update(
                task, description=f"Found {len(remote_templates)} remote template(s)"
            )
        return build_remote_index(remote_templates)

    async def sync(
        self,
        local_templates: list[LocalTemplate],
        dry_run: bool = False,
        continue_on_error: bool = False,
    ) -> list[SyncResult]:
        """Push local templates to the tenant.

        Args:
            local_templates: Templates in load order
            dry_run: If True, only report the plan without writing
            continue_on_error: Record failures and keep going instead of
                aborting on the first failing item

        Returns:
            List of SyncResult, one per local template, in load order

        Raises:
            SyncError: If an item fails and continue_on_error is False
            LogtoAPIError: If the remote listing fails

        Examples:
            >>> engine = SyncEngine(gateway)
            >>> results = await engine.sync(templates, dry_run=True)
            >>> print(categorize_results(results))
        """
        self._warn_duplicates(local_templates)

        remote_index = await self._fetch_remote_index()
        comparator = TemplateComparator(remote_index)
        if not comparator.authoritative:
            self.output.warning(
                "Remote template listing is unavailable; "
                "all templates will be upserted."
            )

        if dry_run:
            decisions = comparator.compare_templates(local_templates)
            self._display_plan(decisions)
            return [
                SyncResult(
                    action=decision.action,
                    key=decision.key,
                    local=decision.local,
                    remote=decision.remote,
                    dry_run=True,
                )
                for decision in decisions
            ]

        results: list[SyncResult] = []
        for index, local in enumerate(local_templates, start=1):
            # Decided per item so that templates written earlier in this run
            # are seen as existing.
            decision = comparator.compare_single(local)
            logger.debug(
                f"[{index}] {decision.key}: {decision.action.value} "
                f"({decision.reason})"
            )
            try:
                outcome = await self._apply(decision)
            except LogtoAPIError as e:
                message = (
                    f"Failed to sync item {index}/{len(local_templates)} "
                    f"({decision.key}, action={decision.action.value}):\n{e}"
                )
                if not continue_on_error:
                    raise SyncError(
                        message,
                        index=index,
                        key=decision.key,
                        status=e.status,
                        method=e.method,
                        url=e.url,
                        body=e.body,
                    ) from e
                self.output.warning(message)
                results.append(
                    SyncResult(
                        action=decision.action,
                        key=decision.key,
                        local=local,
                        remote=decision.remote,
                        error=str(e),
                    )
                )
                continue

            if (
                remote_index is not None
                and outcome.template.id is not None
                and outcome.template.key == decision.key
            ):
                remote_index[decision.key] = outcome.template

            results.append(
                SyncResult(
                    action=decision.action,
                    key=decision.key,
                    local=local,
                    remote=outcome.template,
                    method=outcome.method,
                )
            )
            self._display_applied(decision, outcome)

        return results

    async def _apply(self, decision: SyncDecision) -> WriteOutcome:
        remote = decision.remote
        if decision.action == SyncAction.UPDATE and remote and remote.id:
            return await self.gateway.update_one(remote.id, decision.local)
        return await self.gateway.create_one(decision.local)

    def _warn_duplicates(self, local_templates: list[LocalTemplate]) -> None:
        seen: set[str] = set()
        for local in local_templates:
            if local.key in seen:
                logger.warning(
                    f"Duplicate local template {local.key}; the last one wins"
                )
            seen.add(local.key)

    def _display_plan(self, decisions: list[SyncDecision]) -> None:
        """Display the dry-run plan to the user."""
        if self.output.quiet:
            return
        self.output.info("Sync plan:")
        for decision in decisions:
            self.output.info(
                f"  [dry-run] {decision.action.value:<6} {decision.key} "
                f"({decision.reason})"
            )
        self.output.print("")

    def _display_applied(self, decision: SyncDecision, outcome: WriteOutcome) -> None:
        logger.debug(
            f"{decision.action.value} {decision.key} confirmed via "
            f"{outcome.method} ({outcome.strategy})"
        )
        if self.output.quiet:
            return
        self.output.info(
            f"  {decision.action.value:<6} {decision.key} ({outcome.method})"
        )
        if self.verbose:
            self.output.print(
                json.dumps(outcome.template.to_dict(), indent=2, ensure_ascii=False)
            )
