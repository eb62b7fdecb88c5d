"""Image description and document summarization routes."""

import logging
from typing import Any

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from playground.analysis import ContentKind, InvalidRequestError
from playground.fetch import FetchError

router = APIRouter()
logger = logging.getLogger(__name__)


class SummarizeDocumentBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: str | None = None
    document_type: str | None = Field(default=None, alias="documentType")
    api_choice: str | None = Field(default=None, alias="apiChoice")


class SummarizeUrlBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str | None = None
    api_choice: str | None = Field(default=None, alias="apiChoice")


def _error(status_code: int, message: str, details: str | None = None) -> JSONResponse:
    body: dict[str, Any] = {"error": message}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


def _too_large(max_bytes: int) -> JSONResponse:
    return _error(413, "Image file too large", f"limit is {max_bytes} bytes")


@router.post("/describe-image")
async def describe_image(
    request: Request,
    image: UploadFile | None = File(default=None),
    api_choice: str | None = Form(default=None, alias="apiChoice"),
    focus: str | None = Form(default=None),
) -> Any:
    """Describe an uploaded image."""
    if image is None:
        return _error(400, "No image file provided")

    mime_type = (image.content_type or "").lower()
    if not mime_type.startswith("image/"):
        return _error(400, "Only image files are allowed")

    max_bytes = request.app.state.config.server.max_upload_bytes
    if image.size is not None and image.size > max_bytes:
        return _too_large(max_bytes)
    # size can be unknown; never read more than one byte past the cap
    data = await image.read(max_bytes + 1)
    if len(data) > max_bytes:
        return _too_large(max_bytes)

    logger.info(
        "describe_image_request",
        extra={"bytes": len(data), "mime_type": mime_type, "api_choice": api_choice},
    )
    try:
        result = await request.app.state.dispatcher.analyze(
            data,
            ContentKind.IMAGE,
            api_choice,
            focus=focus,
            mime_type=mime_type,
        )
    except InvalidRequestError as e:
        return _error(400, str(e))
    except Exception as e:
        logger.exception("describe_image_failed")
        return _error(500, "Failed to analyze image", str(e))

    return result.to_image_payload()


@router.post("/summarize-document")
async def summarize_document(request: Request, body: SummarizeDocumentBody) -> Any:
    """Summarize document text sent by the client."""
    if not body.content or not body.content.strip():
        return _error(400, "No content provided")

    logger.info(
        "summarize_document_request",
        extra={"chars": len(body.content), "api_choice": body.api_choice},
    )
    try:
        result = await request.app.state.dispatcher.analyze(
            body.content,
            ContentKind.DOCUMENT,
            body.api_choice,
            document_type=body.document_type,
        )
    except InvalidRequestError as e:
        return _error(400, str(e))
    except Exception as e:
        logger.exception("summarize_document_failed")
        return _error(500, "Failed to summarize document", str(e))

    return result.to_document_payload()


@router.post("/summarize-url")
async def summarize_url(request: Request, body: SummarizeUrlBody) -> Any:
    """Fetch a web page and summarize its text."""
    state = request.app.state
    try:
        page = await state.page_fetcher(body.url or "", state.config.fetch)
    except InvalidRequestError as e:
        return _error(400, str(e))
    except FetchError as e:
        logger.warning(
            "page_fetch_failed",
            extra={"url": e.url, "reason": e.reason, "status_code": e.status_code},
        )
        return _error(502, "Failed to fetch URL", e.reason)

    if not page.text.strip():
        return _error(400, "No readable text found at URL")

    try:
        result = await state.dispatcher.analyze(
            page.text,
            ContentKind.DOCUMENT,
            body.api_choice,
            document_type="webpage",
        )
    except InvalidRequestError as e:
        return _error(400, str(e))
    except Exception as e:
        logger.exception("summarize_url_failed")
        return _error(500, "Failed to summarize URL", str(e))

    payload = result.to_document_payload()
    payload["url"] = page.url
    if page.title:
        payload["title"] = page.title
    return payload
