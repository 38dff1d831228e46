"""FastAPI application for khqrkit."""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from fastapi import Body, Depends, FastAPI, Header, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse, Response

from .config import settings
from .errors import KHQRError
from .logging_conf import configure_logging
from .middleware import RequestLoggingMiddleware
from .monitoring import metrics_payload, record_service_error
from .renderer import choose_display_name, render_qr_payload
from .schemas import (
    DecodeResponse,
    GenerateKHQRResponse,
    IndividualInfo,
    MerchantInfo,
    PayloadRequest,
    RenderRequest,
    VerifyResponse,
)
from .services.errors import ServiceError, err_khqr_invalid
from .services.generator import GenerateResult, KHQRGenerator
from .services.scan import ScanService

app = FastAPI(title="khqrkit", version="0.1.0")
app.add_middleware(RequestLoggingMiddleware)

logger = logging.getLogger("khqrkit.api")


def _warn_insecure_defaults() -> None:
    if settings.api_key == "dev-secret-key":
        logger.warning(
            "api key is using the default value",
            extra={"config_key": "api_key"},
        )


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    _warn_insecure_defaults()


async def require_api_key(x_api_key: str = Header(...)) -> None:
    if x_api_key != settings.api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


def _route_path(request: Request) -> str:
    route = request.scope.get("route")
    return route.path if route else request.url.path


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    route_path = _route_path(request)
    logger.warning(
        "service error",
        extra={"code": exc.code, "path": route_path, "method": request.method},
    )
    record_service_error(exc.code, route_path)
    return JSONResponse(status_code=exc.status_code, content={"code": exc.code, "message": exc.message})


@app.exception_handler(KHQRError)
async def khqr_error_handler(request: Request, exc: KHQRError) -> JSONResponse:
    route_path = _route_path(request)
    logger.warning(
        "khqr error",
        extra={"code": exc.code, "tag": exc.tag, "path": route_path, "method": request.method},
    )
    record_service_error(exc.code, route_path)
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "message": exc.message, "tag": exc.tag},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled exception",
        extra={"path": _route_path(request), "method": request.method},
    )
    return JSONResponse(status_code=500, content={"code": "ERR_INTERNAL", "message": "Internal server error"})


def _generate_response(result: GenerateResult) -> GenerateKHQRResponse:
    return GenerateKHQRResponse(
        payload=result.encoded.payload,
        md5=result.encoded.md5,
        crc=result.encoded.crc,
        qr_png_base64=result.qr_png_base64,
    )


@app.get("/health", tags=["system"])
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metrics", tags=["system"])
async def metrics() -> Response:
    payload, content_type = metrics_payload()
    return Response(content=payload, media_type=content_type)


@app.post(
    "/v1/khqr/individual",
    response_model=GenerateKHQRResponse,
    tags=["khqr"],
    dependencies=[Depends(require_api_key)],
)
async def generate_individual(info: IndividualInfo, image: bool = Query(default=False)) -> GenerateKHQRResponse:
    return _generate_response(KHQRGenerator().create(info, render=image))


@app.post(
    "/v1/khqr/merchant",
    response_model=GenerateKHQRResponse,
    tags=["khqr"],
    dependencies=[Depends(require_api_key)],
)
async def generate_merchant(info: MerchantInfo, image: bool = Query(default=False)) -> GenerateKHQRResponse:
    return _generate_response(KHQRGenerator().create(info, render=image))


@app.post(
    "/v1/khqr/generate",
    response_model=GenerateKHQRResponse,
    tags=["khqr"],
    dependencies=[Depends(require_api_key)],
)
async def generate_from_mapping(
    data: dict[str, Any] = Body(...),
    image: bool = Query(default=False),
) -> GenerateKHQRResponse:
    return _generate_response(KHQRGenerator().create_from_mapping(data, render=image))


@app.post("/v1/khqr/decode", response_model=DecodeResponse, tags=["khqr"], dependencies=[Depends(require_api_key)])
async def decode_khqr(payload: PayloadRequest, strict: bool = Query(default=False)) -> DecodeResponse:
    service = ScanService()
    result = service.validate(payload.payload) if strict else service.inspect(payload.payload)
    return DecodeResponse(strict=result.strict, fields=result.fields)


@app.post("/v1/khqr/verify", response_model=VerifyResponse, tags=["khqr"], dependencies=[Depends(require_api_key)])
async def verify_khqr(payload: PayloadRequest) -> VerifyResponse:
    return VerifyResponse(valid=ScanService().verify(payload.payload))


@app.post("/v1/khqr/image", tags=["khqr"], dependencies=[Depends(require_api_key)])
async def render_khqr(body: RenderRequest) -> Response:
    service = ScanService()
    if not service.verify(body.payload):
        raise err_khqr_invalid()
    fields = service.inspect(body.payload).fields
    amount = body.amount
    if amount is None and fields.get("transaction_amount"):
        amount = Decimal(fields["transaction_amount"])
    rendered = render_qr_payload(
        body.payload,
        display_name=choose_display_name(
            body.display_name,
            store_label=fields.get("store_label"),
            merchant_name=fields.get("merchant_name"),
        ),
        amount=amount,
        currency=body.currency or fields.get("transaction_currency"),
        width=settings.qr_width,
    )
    return Response(content=rendered["png_bytes"], media_type="image/png")
