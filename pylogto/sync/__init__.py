"""Sync engine for pylogto - push, export and list email templates."""

from .comparator import SyncAction, SyncDecision, TemplateComparator, build_remote_index
from .engine import SyncEngine, SyncResult, categorize_results
from .exporter import ExportResult, export_templates, summarize_templates
from .gateway import (
    UPDATE_STRATEGIES,
    ParsedResponse,
    RemoteTemplateGateway,
    ResponseKind,
    StrategyOutcome,
    StrategyStatus,
    WriteOutcome,
    WriteStrategy,
    parse_write_response,
)
from .scanner import TemplateScanner, load_local_templates

__all__ = [
    "SyncEngine",
    "SyncResult",
    "categorize_results",
    "SyncAction",
    "SyncDecision",
    "TemplateComparator",
    "build_remote_index",
    "RemoteTemplateGateway",
    "ParsedResponse",
    "ResponseKind",
    "StrategyOutcome",
    "StrategyStatus",
    "WriteOutcome",
    "WriteStrategy",
    "UPDATE_STRATEGIES",
    "parse_write_response",
    "ExportResult",
    "export_templates",
    "summarize_templates",
    "TemplateScanner",
    "load_local_templates",
]
