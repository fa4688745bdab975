from fastapi import APIRouter, Depends, HTTPException, Request, status

from authsome_otp.config import settings
from authsome_otp.context import CallContext
from authsome_otp.errors import (
    Cancelled,
    CodeMismatch,
    GenerationConstraintViolation,
    MetadataEncodingError,
    OtpError,
    ParentMismatch,
    RecordExpired,
    RecordNotFound,
    ValidationFailed,
)
from authsome_otp.schemas.otp import (
    GenerateRequest,
    GenerateResponse,
    IssueRequest,
    IssueResponse,
    MessageResponse,
    OtpRecordResponse,
    SweepResponse,
    ValidateRequest,
)
from authsome_otp.services.generator import generate_otp
from authsome_otp.services.otp import OtpService

router = APIRouter(prefix="/otp", tags=["otp"])


def get_otp_service(request: Request) -> OtpService:
    return request.app.state.otp_service


def get_call_context() -> CallContext:
    return CallContext(timeout=settings.otp_store_timeout_seconds)


def _http_error(exc: OtpError) -> HTTPException:
    if isinstance(exc, RecordNotFound):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, RecordExpired):
        code = status.HTTP_410_GONE
    elif isinstance(exc, (ValidationFailed, CodeMismatch, ParentMismatch)):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, (GenerationConstraintViolation, MetadataEncodingError)):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(exc, Cancelled):
        code = status.HTTP_504_GATEWAY_TIMEOUT
    else:
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HTTPException(status_code=code, detail=str(exc))


@router.post("/generate", response_model=GenerateResponse)
def generate(payload: GenerateRequest) -> GenerateResponse:
    try:
        code = generate_otp(payload.to_options())
    except OtpError as exc:
        raise _http_error(exc) from exc
    return GenerateResponse(code=code)


@router.post("", response_model=IssueResponse, response_model_exclude_none=True)
def issue(
    payload: IssueRequest,
    service: OtpService = Depends(get_otp_service),
    ctx: CallContext = Depends(get_call_context),
) -> IssueResponse:
    try:
        record_id, code = service.generate_and_issue(
            payload.options.to_options(),
            payload.parent_source,
            payload.parent_id,
            payload.metadata,
            payload.ttl_seconds,
            ctx,
        )
        record = service.fetch(record_id, ctx)
    except OtpError as exc:
        raise _http_error(exc) from exc
    return IssueResponse(
        id=record_id,
        expires_at=record.expires_at,
        expires_in_seconds=record.expires_at - record.created_at,
        code=code if settings.otp_debug else None,
    )


@router.post("/sweep", response_model=SweepResponse)
def sweep(
    service: OtpService = Depends(get_otp_service),
    ctx: CallContext = Depends(get_call_context),
) -> SweepResponse:
    try:
        deleted = service.sweep_expired(ctx=ctx)
    except OtpError as exc:
        raise _http_error(exc) from exc
    return SweepResponse(deleted=deleted)


@router.get("/{record_id}", response_model=OtpRecordResponse)
def fetch(
    record_id: int,
    service: OtpService = Depends(get_otp_service),
    ctx: CallContext = Depends(get_call_context),
) -> OtpRecordResponse:
    try:
        record = service.fetch(record_id, ctx)
    except OtpError as exc:
        raise _http_error(exc) from exc
    return OtpRecordResponse.from_record(record)


@router.post("/{record_id}/validate", response_model=OtpRecordResponse)
def validate(
    record_id: int,
    payload: ValidateRequest,
    service: OtpService = Depends(get_otp_service),
    ctx: CallContext = Depends(get_call_context),
) -> OtpRecordResponse:
    try:
        record = service.validate(
            record_id, payload.code, payload.parent_source, payload.parent_id, ctx
        )
    except OtpError as exc:
        raise _http_error(exc) from exc
    return OtpRecordResponse.from_record(record)


@router.delete("/{record_id}", response_model=MessageResponse)
def revoke(
    record_id: int,
    service: OtpService = Depends(get_otp_service),
    ctx: CallContext = Depends(get_call_context),
) -> MessageResponse:
    try:
        service.revoke(record_id, ctx)
    except OtpError as exc:
        raise _http_error(exc) from exc
    return MessageResponse(message="OTP revoked")
