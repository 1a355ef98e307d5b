"""Remote template gateway over the email templates collection.

The gateway turns the raw ``GET``/``PUT``/``PATCH`` calls of the Management
API into a small uniform contract: a listing that may be unavailable, a bulk
upsert, and single-item writes that walk an ordered list of request
strategies until one yields a recognizable response.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, cast

from ..api import LogtoClient
from ..exceptions import LogtoAPIError, WriteError
from ..models import LocalTemplate, RemoteTemplate
from ..utils import UNSUPPORTED_STATUSES, format_body

logger = logging.getLogger(__name__)

ERROR_FIELDS = ("error", "code", "message")


class ResponseKind(str, Enum):
    """Classification of a write response body."""

    RECOGNIZED = "recognized"
    """Body is template-like (or empty, confirmed by the request payload)"""

    UNRECOGNIZED = "unrecognized"
    """Body has a shape that cannot be trusted as a success"""

    ERROR_SHAPED = "error_shaped"
    """Body carries an error/code/message field"""


@dataclass
class ParsedResponse:
    """Result of parsing a write response body."""

    kind: ResponseKind
    templates: list[RemoteTemplate] = field(default_factory=list)


def _is_error_shaped(value: Any) -> bool:
    return isinstance(value, dict) and any(name in value for name in ERROR_FIELDS)


def _is_template_like(value: Any) -> bool:
    return isinstance(value, dict) and ("id" in value or "templateType" in value)


def parse_write_response(body: Any, payload: Any) -> ParsedResponse:
    """Classify a write response body.

    Args:
        body: Decoded response body (None when the server sent nothing)
        payload: Request payload, used as the confirmed state for an
            empty body. Either one template object or a list of them.

    Returns:
        ParsedResponse with the recognized templates, if any
    """
    if body is None or body == "":
        items = payload if isinstance(payload, list) else [payload]
        return ParsedResponse(
            ResponseKind.RECOGNIZED,
            [RemoteTemplate.from_api_response(item) for item in items],
        )

    if _is_error_shaped(body):
        return ParsedResponse(ResponseKind.ERROR_SHAPED)

    if _is_template_like(body):
        return ParsedResponse(
            ResponseKind.RECOGNIZED, [RemoteTemplate.from_api_response(body)]
        )

    if isinstance(body, list) and body:
        first = body[0]
        if _is_error_shaped(first):
            return ParsedResponse(ResponseKind.ERROR_SHAPED)
        if _is_template_like(first):
            return ParsedResponse(
                ResponseKind.RECOGNIZED,
                [
                    RemoteTemplate.from_api_response(item)
                    for item in body
                    if _is_template_like(item)
                ],
            )

    return ParsedResponse(ResponseKind.UNRECOGNIZED)


class StrategyStatus(str, Enum):
    """Outcome of one write strategy attempt."""

    SUCCESS = "success"
    RETRYABLE = "retryable"
    FATAL = "fatal"


@dataclass
class WriteStrategy:
    """One request shape for writing a single template."""

    name: str
    method: str
    build_path: Callable[[str, str], str]
    """function(base_path, template_id) -> request path"""

    build_body: Callable[[str, dict[str, Any]], Any]
    """function(template_id, payload) -> request body"""


@dataclass
class StrategyOutcome:
    """Result of attempting one strategy."""

    status: StrategyStatus
    method: str
    url: str
    http_status: Optional[int] = None
    body: Any = None
    template: Optional[RemoteTemplate] = None
    """Confirmed template, always set on SUCCESS"""

    message: str = ""

    def to_attempt(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "url": self.url,
            "status": self.http_status,
            "body": self.body,
        }


@dataclass
class WriteOutcome:
    """Confirmed state of a successful single-item write."""

    template: RemoteTemplate
    method: str
    strategy: str


UPDATE_STRATEGIES: list[WriteStrategy] = [
    WriteStrategy(
        name="bulk-with-id",
        method="PUT",
        build_path=lambda base, template_id: base,
        build_body=lambda template_id, payload: {
            "templates": [{"id": template_id, **payload}]
        },
    ),
    WriteStrategy(
        name="item-put",
        method="PUT",
        build_path=lambda base, template_id: f"{base}/{template_id}",
        build_body=lambda template_id, payload: payload,
    ),
    WriteStrategy(
        name="item-patch",
        method="PATCH",
        build_path=lambda base, template_id: f"{base}/{template_id}",
        build_body=lambda template_id, payload: payload,
    ),
]


def confirm_template(
    templates: list[RemoteTemplate], template: LocalTemplate
) -> RemoteTemplate:
    """Pick the confirmed state of ``template`` from a write response.

    Only an element carrying the written key is accepted. A single element
    without type/language (e.g. ``{"id": ...}``) is merged onto the request
    payload. Anything else falls back to the request payload without an id,
    so a record is never confirmed under a key it does not carry.
    """
    for remote in templates:
        if remote.key == template.key:
            return remote

    payload = template.to_payload()
    if len(templates) == 1 and templates[0].key is None:
        return RemoteTemplate.from_api_response({**payload, **templates[0].raw})

    logger.warning(
        f"Write response did not contain {template.key}, "
        "using the request payload as confirmed state"
    )
    return RemoteTemplate.from_api_response(payload)


def format_attempts(attempts: list[dict[str, Any]]) -> str:
    """Render attempted requests, one block per attempt."""
    lines = []
    for number, attempt in enumerate(attempts, start=1):
        lines.append(
            f"  {number}. {attempt['method']} {attempt['url']} "
            f"-> status {attempt['status'] if attempt['status'] is not None else 'n/a'}"
        )
        lines.append(f"     body: {format_body(attempt['body'])}")
    return "\n".join(lines)


class RemoteTemplateGateway:
    """Uniform read/write interface over ``/api/<email-templates-path>``."""

    def __init__(
        self,
        client: LogtoClient,
        email_templates_path: str = "email-templates",
        strategies: Optional[list[WriteStrategy]] = None,
    ):
        """Initialize the gateway.

        Args:
            client: Authenticated Logto API client
            email_templates_path: Collection path segment (no slashes)
            strategies: Ordered update strategies (defaults to
                UPDATE_STRATEGIES)
        """
        self.client = client
        self.email_templates_path = email_templates_path
        self.base_path = f"/api/{email_templates_path}"
        self.strategies = strategies if strategies is not None else UPDATE_STRATEGIES

    def _url(self, path: str) -> str:
        base_url = getattr(self.client, "base_url", "")
        return f"{base_url}{path}"

    async def list_all(self) -> Optional[list[RemoteTemplate]]:
        """List every template of the tenant.

        Returns:
            List of RemoteTemplate, or None when the listing endpoint is not
            available (404/405 or a non-array body)

        Raises:
            LogtoAPIError: For any other failure
        """
        try:
            response = await self.client.get(self.base_path)
        except LogtoAPIError as e:
            if e.status in UNSUPPORTED_STATUSES:
                logger.info(
                    f"Listing {self.base_path} not available (status {e.status})"
                )
                return None
            raise LogtoAPIError(
                f"Failed to list email templates: {e}",
                status=e.status,
                method=e.method,
                url=e.url,
                body=e.body,
            ) from e

        if not isinstance(response.data, list):
            logger.warning(
                f"Listing {self.base_path} did not return an array, "
                "treating remote index as unknown"
            )
            return None

        # Non-object entries become empty placeholders so counts match the listing
        templates = [
            RemoteTemplate.from_api_response(item if isinstance(item, dict) else {})
            for item in response.data
        ]
        logger.debug(f"Listed {len(templates)} remote template(s)")
        return templates

    async def bulk_upsert(
        self, templates: list[LocalTemplate]
    ) -> list[RemoteTemplate]:
        """Create or replace a batch of templates with one ``PUT``.

        Args:
            templates: Templates to write

        Returns:
            Confirmed remote templates

        Raises:
            WriteError: If the request fails or the response is not
                recognizable; the whole batch is considered failed
        """
        payloads = [template.to_payload() for template in templates]
        url = self._url(self.base_path)
        try:
            response = await self.client.put(
                self.base_path, json={"templates": payloads}
            )
        except LogtoAPIError as e:
            attempt = {"method": "PUT", "url": url, "status": e.status, "body": e.body}
            raise WriteError(
                f"Bulk upsert of {len(payloads)} template(s) failed: {e}\n"
                f"{format_attempts([attempt])}",
                attempts=[attempt],
                status=e.status,
                method="PUT",
                url=url,
                body=e.body,
            ) from e

        parsed = parse_write_response(response.data, payloads)
        if parsed.kind != ResponseKind.RECOGNIZED:
            attempt = {
                "method": "PUT",
                "url": url,
                "status": response.status,
                "body": response.data,
            }
            raise WriteError(
                f"Bulk upsert returned an {parsed.kind.value} response\n"
                f"{format_attempts([attempt])}",
                attempts=[attempt],
                status=response.status,
                method="PUT",
                url=url,
                body=response.data,
            )
        return parsed.templates

    async def create_one(self, template: LocalTemplate) -> WriteOutcome:
        """Create (or replace) one template through a single-element bulk upsert."""
        confirmed = confirm_template(await self.bulk_upsert([template]), template)
        return WriteOutcome(template=confirmed, method="PUT", strategy="bulk")

    async def _attempt(
        self, strategy: WriteStrategy, template_id: str, template: LocalTemplate
    ) -> StrategyOutcome:
        payload = template.to_payload()
        path = strategy.build_path(self.base_path, template_id)
        body = strategy.build_body(template_id, payload)
        url = self._url(path)
        logger.debug(f"Trying strategy {strategy.name}: {strategy.method} {url}")

        try:
            response = await self.client.request(strategy.method, path, json=body)
        except LogtoAPIError as e:
            status = (
                StrategyStatus.RETRYABLE
                if e.status in UNSUPPORTED_STATUSES
                else StrategyStatus.FATAL
            )
            return StrategyOutcome(
                status=status,
                method=strategy.method,
                url=url,
                http_status=e.status,
                body=e.body,
                message=str(e),
            )

        parsed = parse_write_response(response.data, payload)
        if parsed.kind != ResponseKind.RECOGNIZED:
            return StrategyOutcome(
                status=StrategyStatus.FATAL,
                method=strategy.method,
                url=url,
                http_status=response.status,
                body=response.data,
                message=f"{parsed.kind.value} response body",
            )

        return StrategyOutcome(
            status=StrategyStatus.SUCCESS,
            method=strategy.method,
            url=url,
            http_status=response.status,
            body=response.data,
            template=confirm_template(parsed.templates, template),
        )

    async def update_one(
        self, template_id: str, template: LocalTemplate
    ) -> WriteOutcome:
        """Update one template, trying each strategy in order.

        404/405 on a strategy moves on to the next one; any other failure
        stops immediately.

        Args:
            template_id: Remote id of the template
            template: Local template to write

        Returns:
            WriteOutcome of the first successful strategy

        Raises:
            WriteError: On a fatal failure or when every strategy is exhausted
        """
        attempts: list[dict[str, Any]] = []

        for strategy in self.strategies:
            outcome = await self._attempt(strategy, template_id, template)
            attempts.append(outcome.to_attempt())

            if outcome.status == StrategyStatus.SUCCESS:
                logger.debug(
                    f"Updated {template.key} via {strategy.name} ({outcome.method})"
                )
                return WriteOutcome(
                    template=cast(RemoteTemplate, outcome.template),
                    method=outcome.method,
                    strategy=strategy.name,
                )

            if outcome.status == StrategyStatus.FATAL:
                raise WriteError(
                    f"Failed to update {template.key} (id={template_id}) "
                    f"via {outcome.method} {outcome.url}: {outcome.message}\n"
                    f"{format_attempts(attempts)}",
                    attempts=attempts,
                    status=outcome.http_status,
                    method=outcome.method,
                    url=outcome.url,
                    body=outcome.body,
                )

            logger.debug(
                f"Strategy {strategy.name} not supported "
                f"(status {outcome.http_status}), trying next"
            )

        raise WriteError(
            f"All update strategies failed for {template.key} (id={template_id}):\n"
            f"{format_attempts(attempts)}",
            attempts=attempts,
        )
