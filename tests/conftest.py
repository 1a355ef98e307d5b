"""Shared fixtures and fakes for pylogto tests."""

import copy
import json
from pathlib import Path
from typing import Any, Callable, Optional, Union

import pytest

from pylogto.api import ApiResponse
from pylogto.exceptions import LogtoAPIError, LogtoNotFoundError
from pylogto.models import LocalTemplate, TemplateDetails

BASE_URL = "https://tenant.logto.app"
BASE_PATH = "/api/email-templates"

Route = Union[ApiResponse, Exception, Callable[[Any], Any]]


def api_error(status: int, body: Any = None, method: str = "PUT") -> LogtoAPIError:
    """Build the error the API client raises for an error status."""
    return LogtoAPIError(
        f"API request failed with status {status}",
        status=status,
        method=method,
        url=f"{BASE_URL}{BASE_PATH}",
        body=body,
    )


class FakeLogtoClient:
    """Records requests and answers from a route table.

    Routes map ``(method, path)`` to an ApiResponse, an exception to raise,
    or a callable receiving the JSON body. Unknown routes answer 404.
    """

    base_url = BASE_URL

    def __init__(self, routes: Optional[dict[tuple[str, str], Route]] = None):
        self.routes = routes or {}
        self.calls: list[tuple[str, str, Any]] = []
        self.closed = False

    async def request(self, method: str, path: str, json: Any = None) -> ApiResponse:
        self.calls.append((method, path, copy.deepcopy(json)))
        route = self.routes.get((method, path))
        if route is None:
            raise LogtoNotFoundError(
                "Resource not found",
                status=404,
                method=method,
                url=f"{BASE_URL}{path}",
                body={"message": "Not found"},
            )
        if callable(route):
            route = route(json)
        if isinstance(route, Exception):
            raise route
        return route

    async def get(self, path: str) -> ApiResponse:
        return await self.request("GET", path)

    async def put(self, path: str, json: Any = None) -> ApiResponse:
        return await self.request("PUT", path, json=json)

    async def patch(self, path: str, json: Any = None) -> ApiResponse:
        return await self.request("PATCH", path, json=json)

    async def aclose(self) -> None:
        self.closed = True

    @property
    def writes(self) -> list[tuple[str, str, Any]]:
        return [call for call in self.calls if call[0] != "GET"]


class FakeTemplateServer(FakeLogtoClient):
    """In-memory email templates collection supporting list and bulk PUT."""

    def __init__(self, templates: Optional[list[dict[str, Any]]] = None):
        super().__init__()
        self.templates: list[dict[str, Any]] = copy.deepcopy(templates or [])
        self._next_id = 100
        self.routes[("GET", BASE_PATH)] = lambda body: ApiResponse(
            200, copy.deepcopy(self.templates)
        )
        self.routes[("PUT", BASE_PATH)] = self._bulk_put

    def _bulk_put(self, body: Any) -> ApiResponse:
        confirmed = []
        for item in body["templates"]:
            existing = self.find(item["templateType"], item["languageTag"])
            if existing is None:
                existing = {"id": item.get("id") or f"tpl_{self._next_id}"}
                self._next_id += 1
                self.templates.append(existing)
            existing.update(
                {
                    "templateType": item["templateType"],
                    "languageTag": item["languageTag"],
                    "details": copy.deepcopy(item["details"]),
                }
            )
            confirmed.append(copy.deepcopy(existing))
        return ApiResponse(200, confirmed)

    def find(self, template_type: str, language_tag: str) -> Optional[dict[str, Any]]:
        for template in self.templates:
            if (
                template.get("templateType") == template_type
                and template.get("languageTag") == language_tag
            ):
                return template
        return None


def make_local(
    template_type: str = "SignIn",
    language_tag: str = "en",
    subject: str = "Sign in",
    content: str = "<p>{{code}}</p>",
    content_type: Optional[str] = "text/html",
) -> LocalTemplate:
    return LocalTemplate(
        template_type=template_type,
        language_tag=language_tag,
        details=TemplateDetails(
            subject=subject, content=content, content_type=content_type
        ),
    )


def remote_dict(
    template_type: str = "SignIn",
    language_tag: str = "en",
    template_id: str = "1",
    subject: str = "Old subject",
    content: str = "<p>old</p>",
) -> dict[str, Any]:
    return {
        "id": template_id,
        "templateType": template_type,
        "languageTag": language_tag,
        "details": {
            "subject": subject,
            "content": content,
            "contentType": "text/html",
        },
    }


def write_template_dir(
    root: Path,
    template_type: str,
    language_tag: str,
    subject: Optional[str] = "Sign in\n",
    content: Optional[str] = "<p>{{code}}</p>\n",
    content_file: str = "content.html",
    meta: Optional[dict[str, Any]] = None,
) -> Path:
    """Create ``root/<type>/<lang>/`` with the given files."""
    template_dir = root / template_type / language_tag
    template_dir.mkdir(parents=True, exist_ok=True)
    if subject is not None:
        (template_dir / "subject.txt").write_text(subject, encoding="utf-8")
    if content is not None:
        (template_dir / content_file).write_text(content, encoding="utf-8")
    if meta is not None:
        (template_dir / "meta.json").write_text(json.dumps(meta), encoding="utf-8")
    return template_dir


@pytest.fixture
def templates_root(tmp_path):
    """Templates directory with SignIn/en and SignIn/zh-CN."""
    root = tmp_path / "templates"
    write_template_dir(root, "SignIn", "en", subject="Sign in\n")
    write_template_dir(root, "SignIn", "zh-CN", subject="登录\n")
    return root
