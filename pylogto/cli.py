"""CLI interface for managing Logto email templates as code."""

import asyncio
import logging
from collections.abc import Awaitable
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

import click

from .api import LogtoClient, describe_error
from .auth import create_api_client
from .config import load_config
from .exceptions import LogtoAPIError
from .models import TemplateSummary
from .output import OutputFormatter
from .sync import (
    RemoteTemplateGateway,
    SyncEngine,
    categorize_results,
    export_templates,
    load_local_templates,
    summarize_templates,
)
from .utils import parse_csv_set

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_with_gateway(
    ctx: Any, action: Callable[[RemoteTemplateGateway], Awaitable[T]]
) -> T:
    """Load config, authenticate and run ``action`` with a gateway.

    The API client is closed when the action finishes.
    """
    config = load_config(ctx.obj["env_file"])

    async def _run() -> T:
        client: LogtoClient = await create_api_client(config)
        try:
            gateway = RemoteTemplateGateway(client, config.email_templates_path)
            return await action(gateway)
        finally:
            await client.aclose()

    return asyncio.run(_run())


def configure_logging(verbose: bool) -> None:
    """Set up logging: DEBUG for pylogto when verbose, WARNING otherwise."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pylogto").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


def resolve_verbose(ctx: Any, verbose: bool) -> bool:
    """Combine the command level --verbose with the group level one."""
    if verbose and not ctx.obj["verbose"]:
        ctx.obj["verbose"] = True
        configure_logging(True)
    return ctx.obj["verbose"]


command_verbose_option = click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Print API responses and enable debug logging (same as the global -v)",
)


@click.group()
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False),
    default=".env",
    show_default=True,
    help="Load LOGTO_* variables from a .env file",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output and print API responses",
)
@click.version_option()
@click.pass_context
def main(ctx: Any, env_file: str, quiet: bool, json: bool, verbose: bool) -> None:
    """PyLogto - Manage Logto email templates as code.

    Credentials are read from LOGTO_ENDPOINT, LOGTO_M2M_CLIENT_ID,
    LOGTO_M2M_CLIENT_SECRET (and optionally LOGTO_TENANT_ID,
    LOGTO_EMAIL_TEMPLATES_PATH), from the environment or the --env-file.
    """
    ctx.ensure_object(dict)
    ctx.obj["env_file"] = env_file
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose
    configure_logging(verbose)


@main.command()
@click.option(
    "--dir",
    "templates_dir",
    type=click.Path(file_okay=False),
    default="templates",
    show_default=True,
    help="Templates directory",
)
@click.option("--only", help="Comma-separated template types (e.g. SignIn,Register)")
@click.option("--languages", help="Comma-separated language tags (e.g. en,zh-CN)")
@click.option(
    "--dry-run", is_flag=True, help="Print plan but do not call write APIs"
)
@click.option(
    "--continue-on-error",
    is_flag=True,
    help="Keep going after a failing template and report all failures",
)
@command_verbose_option
@click.pass_context
def sync(
    ctx: Any,
    templates_dir: str,
    only: Optional[str],
    languages: Optional[str],
    dry_run: bool,
    continue_on_error: bool,
    verbose: bool,
) -> None:
    """Push local templates to Logto via the Management API.

    Templates are read from DIR/<templateType>/<languageTag>/ with
    subject.txt, content.html or content.txt and an optional meta.json.
    Remote templates missing locally are never deleted.

    Examples:
        pylogto sync --dry-run
        pylogto sync --only SignIn,Register --languages en,zh-CN
    """
    out: OutputFormatter = ctx.obj["out"]
    verbose = resolve_verbose(ctx, verbose)

    try:
        templates = load_local_templates(
            Path(templates_dir),
            only_types=parse_csv_set(only),
            only_languages=parse_csv_set(languages),
        )
        if not templates:
            out.info(f"No templates found under: {Path(templates_dir).resolve()}")
            return

        if dry_run:
            out.info("Dry run: No changes will be made")

        def _sync(gateway: RemoteTemplateGateway) -> Awaitable[Any]:
            engine = SyncEngine(gateway, out, verbose=verbose)
            return engine.sync(
                templates, dry_run=dry_run, continue_on_error=continue_on_error
            )

        results = run_with_gateway(ctx, _sync)
    except LogtoAPIError as e:
        out.error(describe_error(e))
        ctx.exit(1)
        return

    stats = categorize_results(results)
    if out.json_output:
        out.output_json(
            {
                "dryRun": dry_run,
                "stats": stats,
                "results": [result.to_dict() for result in results],
            }
        )
    else:
        counts = (
            f"(create={stats['create']}, update={stats['update']}, "
            f"upsert={stats['upsert']})"
        )
        if dry_run:
            out.success(f"[dry-run] Done. planned={stats['total']} {counts}")
        else:
            out.success(f"Done. processed={stats['total']} {counts}")

    if stats["failed"]:
        out.error(f"{stats['failed']} template(s) failed to sync")
        ctx.exit(1)


@main.command()
@click.option(
    "--out",
    "out_dir",
    type=click.Path(file_okay=False),
    default="exported-templates",
    show_default=True,
    help="Output directory",
)
@command_verbose_option
@click.pass_context
def export(ctx: Any, out_dir: str, verbose: bool) -> None:
    """Download templates from Logto into local folders.

    The output uses the same layout that ``sync`` reads, so an exported
    directory can be synced back unchanged.
    """
    out: OutputFormatter = ctx.obj["out"]
    verbose = resolve_verbose(ctx, verbose)

    try:
        result = run_with_gateway(
            ctx, lambda gateway: export_templates(gateway, out_dir)
        )
    except LogtoAPIError as e:
        out.error(describe_error(e))
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json(
            {
                "count": result.count,
                "outDir": str(result.out_dir),
                "templates": [t.to_dict() for t in result.templates],
            }
        )
        return

    out.success(f"Exported {result.count} templates to: {result.out_dir}")

    if verbose:
        out.print("")
        out.info("Exported templates:")
        for template in result.templates:
            details = template.details
            out.info(
                f"  - {template.template_type}/{template.language_tag} "
                f"(ID: {template.id or 'N/A'})"
            )
            out.info(f"    Subject: {(details and details.subject) or '(empty)'}")
            out.info(
                f"    Content type: {(details and details.content_type) or 'text/html'}"
            )
            if details and details.reply_to:
                out.info(f"    Reply to: {details.reply_to}")
            if details and details.send_from:
                out.info(f"    Send from: {details.send_from}")


def _display_summaries(out: OutputFormatter, summaries: list[TemplateSummary]) -> None:
    """Print summaries grouped by template type."""
    by_type: dict[str, list[TemplateSummary]] = {}
    for summary in summaries:
        by_type.setdefault(summary.template_type or "", []).append(summary)

    out.info(f"Found {len(summaries)} email template(s) in Logto:")
    out.print("")

    for template_type in sorted(by_type):
        out.info(f"{template_type}:")
        items = sorted(by_type[template_type], key=lambda s: s.language_tag or "")
        for summary in items:
            language = summary.language_tag or ""
            out.info(f"  {language:<8} | Subject: {summary.subject or '(empty)'}")
            out.info(
                f"           | Content: {summary.content_type} "
                f"({summary.content_length} chars)"
            )
            if summary.id:
                out.info(f"           | ID: {summary.id}")
            extras = []
            if summary.reply_to:
                extras.append(f"ReplyTo: {summary.reply_to}")
            if summary.send_from:
                extras.append(f"SendFrom: {summary.send_from}")
            if extras:
                out.info(f"           | {', '.join(extras)}")
            out.print("")


@main.command(name="list")
@click.pass_context
def list_templates(ctx: Any) -> None:
    """List all email templates from Logto (summary view)."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        summaries = run_with_gateway(ctx, summarize_templates)
    except LogtoAPIError as e:
        out.error(describe_error(e))
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json([summary.to_dict() for summary in summaries])
        return

    if not summaries:
        out.info("No email templates found in Logto.")
        return

    _display_summaries(out, summaries)


if __name__ == "__main__":
    main()
