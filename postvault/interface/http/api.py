"""HTTP API for posts.

Pure delegation: request bodies are validated into typed DTOs here, the
repository does the work, and Result reasons map to status codes
(slug_exists -> 409, not_found -> 404). Store failures become 500.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Literal, cast

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field, field_validator

from postvault.application.dto.post_dto import CreatePostInput, UpdatePostInput
from postvault.application.use_cases.post_repository import PostRepository
from postvault.config.compose import Container, build_container, configure_logging
from postvault.domain.errors import DomainError
from postvault.domain.models import PostRecord, PostStatus, PostWithContent

logger = logging.getLogger(__name__)

CACHE_CONTROL = "public, max-age=60, stale-while-revalidate=300"


# Pydantic models for request validation
class CreatePostModel(BaseModel):
    """Request body for POST /api/posts."""

    model_config = ConfigDict(populate_by_name=True)

    slug: str
    title: str
    excerpt: str
    content: str
    status: Literal["draft", "published"] | None = None
    published_at: str | None = Field(default=None, alias="publishedAt")

    @field_validator("slug", "title", "excerpt", "content")
    @classmethod
    def _required_text(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must be a non-empty string")
        return v

    @field_validator("published_at")
    @classmethod
    def _blank_is_absent(cls, v: str | None) -> str | None:
        return v if v and v.strip() else None

    def to_input(self) -> CreatePostInput:
        return CreatePostInput(
            slug=self.slug,
            title=self.title,
            excerpt=self.excerpt,
            content=self.content,
            status=PostStatus(self.status) if self.status else None,
            published_at=self.published_at,
        )


class UpdatePostModel(BaseModel):
    """Request body for PUT /api/posts/{slug}; blank strings count as absent."""

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    excerpt: str | None = None
    content: str | None = None
    status: Literal["draft", "published"] | None = None
    published_at: str | None = Field(default=None, alias="publishedAt")

    @field_validator("title", "excerpt", "content", "published_at")
    @classmethod
    def _blank_is_absent(cls, v: str | None) -> str | None:
        return v if v and v.strip() else None

    def to_input(self) -> UpdatePostInput:
        return UpdatePostInput(
            title=self.title,
            excerpt=self.excerpt,
            content=self.content,
            status=PostStatus(self.status) if self.status else None,
            published_at=self.published_at,
        )


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    return [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors()]


def _post_body(found: PostWithContent) -> dict[str, Any]:
    return {"post": {**found.post.to_dict(), "content": found.content}}


def _etag_matches(header: str | None, etag: str) -> bool:
    if not header:
        return False
    candidates = {c.strip().removeprefix("W/").strip('"') for c in header.split(",")}
    return "*" in candidates or etag in candidates


def create_app(container: Container | None = None) -> FastAPI:
    """Build the FastAPI app.

    Args:
        container: Pre-built container (tests); built from the environment
            on startup when omitted
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if getattr(app.state, "container", None) is None:
            built = build_container()
            configure_logging(built.settings)
            app.state.container = built
        yield

    app = FastAPI(title="postvault", version="1.0.0", lifespan=lifespan)
    app.state.container = container

    def repo(request: Request) -> PostRepository:
        return request.app.state.container.get_post_repository()

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            {"error": "Invalid request body", "detail": _jsonable_errors(exc)}, status_code=400
        )

    @app.exception_handler(DomainError)
    async def storage_failure(request: Request, exc: DomainError) -> JSONResponse:
        logger.error("%s %s failed", request.method, request.url.path, exc_info=exc)
        return _error(500, "Internal server error")

    # ===== Public =====

    @app.get("/posts")
    async def list_published(request: Request) -> JSONResponse:
        posts = await repo(request).list_published()
        return JSONResponse(
            {"posts": [p.to_dict() for p in posts]},
            headers={"Cache-Control": CACHE_CONTROL},
        )

    @app.get("/posts/{slug}")
    async def get_published(slug: str, request: Request) -> Response:
        found = await repo(request).get_published(slug)
        if found is None or found.content is None:
            return _error(404, "Post not found")

        headers = {"Cache-Control": CACHE_CONTROL}
        if found.etag:
            headers["ETag"] = f'"{found.etag}"'
            if _etag_matches(request.headers.get("if-none-match"), found.etag):
                return Response(status_code=304, headers=headers)
        return JSONResponse(_post_body(found), headers=headers)

    # ===== Admin =====

    @app.get("/api/posts")
    async def list_all(request: Request) -> dict[str, Any]:
        posts = await repo(request).list()
        return {"posts": [p.to_dict() for p in posts]}

    @app.get("/api/posts/{slug}")
    async def get_any(slug: str, request: Request) -> Response:
        found = await repo(request).get_any(slug)
        if found is None:
            return _error(404, "Post not found")
        if found.content is None:
            return _error(404, "Post content missing")
        return JSONResponse(_post_body(found))

    @app.post("/api/posts")
    async def create(body: CreatePostModel, request: Request) -> JSONResponse:
        result = await repo(request).create(body.to_input())
        if not result.ok:
            return _error(409, "Slug already exists")
        created = cast(PostRecord, result.value)
        return JSONResponse({"post": created.to_dict()}, status_code=201)

    @app.put("/api/posts/{slug}")
    async def update(slug: str, body: UpdatePostModel, request: Request) -> JSONResponse:
        result = await repo(request).update(slug, body.to_input())
        if not result.ok:
            return _error(404, "Post not found")
        updated = cast(PostRecord, result.value)
        return JSONResponse({"post": updated.to_dict()})

    @app.delete("/api/posts/{slug}")
    async def delete(slug: str, request: Request) -> JSONResponse:
        result = await repo(request).delete(slug)
        if not result.ok:
            return _error(404, "Post not found")
        return JSONResponse({"deleted": True})

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy", "service": "postvault"}

    return app


app = create_app()
