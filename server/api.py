"""FastAPI gateway over the clothing-item store and the image blob store."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from pydantic import AliasChoices, BaseModel, Field, field_validator

from agents.style_advisor import StyleAdvisor
from aura_app.config import AuraConfig
from aura_app.logging_config import configure_logging, get_logger, log_event
from models.errors import AuthError, ServiceUnavailable, ValidationError
from models.taxonomy import validate_category, validate_pattern, validate_season, validate_style
from server.auth import ANONYMOUS_USER, TokenVerifier, bearer_token
from tools.image_store import ImageStore, LocalImageStore, image_name
from tools.wardrobe_store import SQLiteWardrobeStore, WardrobeStore

LOGGER = get_logger(__name__)


class ItemCreateRequest(BaseModel):
    """Request payload for ``POST /items``."""

    image_data: Optional[str] = Field(None, validation_alias=AliasChoices("imageData", "image_data"))
    mime_type: Optional[str] = Field(
        None, validation_alias=AliasChoices("mimeType", "mimetype", "mime_type")
    )
    category: str
    color: str = ""
    pattern: Optional[str] = None
    style: str
    season: str
    description: str = ""

    @field_validator("category")
    @classmethod
    def _category(cls, value: str) -> str:
        return validate_category(value)

    @field_validator("pattern")
    @classmethod
    def _pattern(cls, value: Optional[str]) -> Optional[str]:
        return validate_pattern(value)

    @field_validator("style")
    @classmethod
    def _style(cls, value: str) -> str:
        return validate_style(value)

    @field_validator("season")
    @classmethod
    def _season(cls, value: str) -> str:
        return validate_season(value)


class AnalyzeRequest(BaseModel):
    """Request payload for ``POST /analyze``."""

    image_base64: Optional[str] = Field(None, validation_alias=AliasChoices("imageBase64", "image_base64"))
    mime_type: Optional[str] = Field(None, validation_alias=AliasChoices("mimetype", "mimeType", "mime_type"))


def create_app(
    config: AuraConfig | None = None,
    store: WardrobeStore | None = None,
    image_store: ImageStore | None = None,
    advisor: StyleAdvisor | None = None,
    verifier: TokenVerifier | None = None,
) -> FastAPI:
    """Build the gateway with injectable collaborators.

    With ``auth_required`` switched off every request acts as a single
    anonymous user and ownership checks are skipped.
    """

    config = config or AuraConfig.from_env()
    store = store or SQLiteWardrobeStore(config.database_path)
    images = image_store or LocalImageStore(config.image_dir)
    advisor = advisor or StyleAdvisor(config)
    if config.auth_required and verifier is None:
        if not config.auth_secret:
            raise RuntimeError("Missing AURA_AUTH_SECRET; set it or disable auth with AURA_AUTH_REQUIRED=false")
        verifier = TokenVerifier(config.auth_secret)

    app = FastAPI(title="Aura Wardrobe Gateway", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if isinstance(images, LocalImageStore):
        app.mount("/images", StaticFiles(directory=str(images.base_dir)), name="images")

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def _validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        messages = "; ".join(str(error.get("msg", "invalid value")) for error in exc.errors())
        return JSONResponse(status_code=400, content={"error": messages or "Malformed request body"})

    def current_user(authorization: Optional[str] = Header(None)) -> str:
        if not config.auth_required:
            return ANONYMOUS_USER
        try:
            return verifier.verify(bearer_token(authorization))
        except AuthError as exc:
            raise HTTPException(status_code=401, detail=exc.message) from exc

    def public_url(request: Request, relative: str) -> str:
        base = config.public_base_url or str(request.base_url)
        return f"{base.rstrip('/')}/{relative}"

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/items")
    def list_items(user_id: str = Depends(current_user)) -> list:
        return [item.to_record() for item in store.list_items_for_user(user_id)]

    @app.post("/items", status_code=201)
    def create_item(payload: ItemCreateRequest, request: Request, user_id: str = Depends(current_user)) -> dict:
        if not payload.image_data or not payload.mime_type:
            raise HTTPException(status_code=400, detail="Missing imageData or mimetype")
        try:
            image_bytes = base64.b64decode(payload.image_data)
        except (binascii.Error, ValueError) as exc:
            raise HTTPException(status_code=400, detail="imageData is not valid base64") from exc

        attributes = payload.model_dump(include={"category", "color", "pattern", "style", "season", "description"})
        created = store.insert_item(user_id, payload.mime_type, attributes)
        name = image_name(created.id, payload.mime_type)
        try:
            relative = images.save(name, image_bytes)
        except OSError as exc:
            store.delete_item(created.id)
            log_event(LOGGER, logging.ERROR, "image_upload_failed", item_id=created.id, error=str(exc))
            raise HTTPException(status_code=500, detail=f"Failed to upload image: {exc}") from exc

        updated = store.set_image_url(created.id, public_url(request, relative))
        if updated is None:
            raise HTTPException(status_code=500, detail="Failed to save image URL")
        log_event(LOGGER, logging.INFO, "item_created", item_id=updated.id, user_id=user_id)
        return updated.to_record()

    @app.delete("/items/{item_id}")
    def delete_item(item_id: str, user_id: str = Depends(current_user)) -> dict:
        item = store.get_item(int(item_id)) if item_id.isdigit() else None
        if item is None:
            raise HTTPException(status_code=404, detail="Item not found")
        if config.auth_required and item.user_id != user_id:
            raise HTTPException(status_code=403, detail="Unauthorized - you do not own this item")

        images.delete(image_name(item.id, item.mime_type))
        if not store.delete_item(item.id):
            raise HTTPException(status_code=404, detail="Item not found")
        log_event(LOGGER, logging.INFO, "item_deleted", item_id=item.id, user_id=user_id)
        return {"message": "Item deleted successfully"}

    @app.post("/analyze")
    def analyze(payload: AnalyzeRequest) -> dict:
        if not payload.image_base64 or not payload.mime_type:
            raise HTTPException(status_code=400, detail="Missing imageBase64 or mimetype")
        try:
            analysis = advisor.analyze_clothing_image(payload.image_base64, payload.mime_type)
        except ServiceUnavailable as exc:
            raise HTTPException(status_code=500, detail=exc.message) from exc
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail="imageBase64 is not valid base64") from exc
        return analysis.attributes()

    return app


def get_app() -> FastAPI:
    """ASGI factory: ``uvicorn server.api:get_app --factory``."""

    configure_logging()
    return create_app()


def serve(config: AuraConfig | None = None) -> None:
    import uvicorn

    config = config or AuraConfig.from_env()
    uvicorn.run("server.api:get_app", factory=True, host=config.host, port=config.port, reload=False)


if __name__ == "__main__":
    serve()
