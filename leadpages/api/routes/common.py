"""Helpers partagés par les routes : token admin, enveloppes JSON, sérialisation."""
import os
from typing import Any, List, Optional

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from ...core.document import ConfigIssue
from ...database import page_document
from ...models import LandingPageDB, LandingPageOut


def _check_token(request: Request):
    token = request.query_params.get("token") or request.cookies.get("admin_token", "")
    if token != os.getenv("ADMIN_TOKEN", "changeme"):
        raise HTTPException(403, "Access denied")
    return token


def ok(data: Any = None, message: Optional[str] = None) -> dict:
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    return body


def fail(status: int, error: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status, content={"success": False, "error": error, **extra})


def issues_response(issues: List[ConfigIssue]) -> JSONResponse:
    return fail(400, "Invalid page configuration",
                issues=[i.model_dump(exclude_none=True) for i in issues])


def page_out(page: LandingPageDB) -> dict:
    doc = page_document(page)
    out = LandingPageOut(
        id=page.id, slug=page.slug, name=page.name, status=page.status, page_type=page.page_type,
        meta_title=page.meta_title, meta_description=page.meta_description,
        sections=doc.sections, form_flow=doc.form_flow, is_default=bool(page.is_default),
        published_at=page.published_at, views=page.views or 0, submissions=page.submissions or 0,
        created_at=page.created_at, updated_at=page.updated_at,
    )
    return out.model_dump(mode="json", by_alias=True, exclude_none=True)
