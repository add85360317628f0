"""Convert module routes."""

import re
from typing import Any

from fastapi import APIRouter, Depends, Request, Response
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import FormData

from pdfgateway.modules.renderer import RendererProcess
from pdfgateway.shared.errors import ValidationError

from .schemas import ConvertRequest
from .service import ConversionService, content_disposition

router = APIRouter(tags=["convert"])

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# options[format]=A4 or options.format=A4
_FORM_OPTION_KEY = re.compile(r"^options(?:\[(\w+)\]|\.(\w+))$")


def get_renderer(request: Request) -> RendererProcess:
    """The renderer built with the app lives on ``app.state``."""
    return request.app.state.renderer


def get_service(renderer: RendererProcess = Depends(get_renderer)) -> ConversionService:
    return ConversionService(renderer)


def form_to_payload(form: FormData) -> dict[str, Any]:
    """Map urlencoded fields onto the JSON request shape."""
    payload: dict[str, Any] = {}
    options: dict[str, Any] = {}

    for key, value in form.multi_items():
        if not isinstance(value, str):
            continue
        match = _FORM_OPTION_KEY.match(key)
        if match:
            # Empty form fields mean "not provided"
            options[match.group(1) or match.group(2)] = value or None
        elif key in ("html", "filename"):
            payload[key] = value

    if options:
        payload["options"] = options
    return payload


async def read_convert_request(request: Request) -> ConvertRequest:
    """
    Parse the body as JSON, or as an urlencoded form.

    Raises:
        ValidationError: the body is malformed or has the wrong shape.
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(FORM_CONTENT_TYPE):
        data: Any = form_to_payload(await request.form())
    else:
        try:
            data = await request.json()
        except ValueError as e:
            raise ValidationError(f"Invalid request body: malformed JSON ({e})") from e

    if not isinstance(data, dict):
        raise ValidationError("Invalid request body: expected a JSON object")

    try:
        return ConvertRequest.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ValidationError(f"Invalid request body: {field}: {first['msg']}") from e


@router.post("/convert")
async def convert(
    convert_request: ConvertRequest = Depends(read_convert_request),
    service: ConversionService = Depends(get_service),
) -> Response:
    """
    Convert HTML to PDF.

    Accepts JSON or urlencoded form bodies. Returns the PDF as binary
    content; failures are rendered as JSON by the application's error handler.
    """
    artifact = await service.convert(convert_request)

    return Response(
        content=artifact.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": content_disposition(artifact.filename),
            "Content-Length": str(artifact.size),
            "X-Processing-Time": str(artifact.elapsed_ms),
        },
    )
