import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse

from ..config import Settings
from ..deps import get_app_settings, get_coordinator
from ..errors import IntakeError, MalformedRequestError
from ..logging import get_logger
from ..storage import PDF_CONTENT_TYPE, IncomingDocument
from ..submission import SubmissionCoordinator, SubmissionState
from ..validation import validate_form

router = APIRouter()
logger = get_logger(__name__)


def _parse_form_data(data: Optional[str]) -> Dict[str, Any]:
    if not data:
        return {}
    try:
        parsed = json.loads(data)
    except json.JSONDecodeError:
        raise MalformedRequestError("Invalid form data.")
    if not isinstance(parsed, dict):
        raise MalformedRequestError("Invalid form data.")
    return parsed


async def _read_pdf(upload: UploadFile, field: str, max_bytes: int) -> IncomingDocument:
    if upload.content_type != PDF_CONTENT_TYPE:
        raise MalformedRequestError("Only PDF files are allowed!", field=field)
    content = await upload.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise MalformedRequestError(f"File too large. Maximum size: {max_bytes // (1024 * 1024)}MB", field=field)
    return IncomingDocument(
        field=field,
        filename=upload.filename or f"{field}.pdf",
        content_type=upload.content_type,
        content=content,
    )


@router.post("/upload", status_code=201)
async def submit_application(
    request: Request,
    data: Optional[str] = Form(None),
    resume: Optional[UploadFile] = File(None),
    academics: Optional[UploadFile] = File(None),
    coordinator: SubmissionCoordinator = Depends(get_coordinator),
    settings: Settings = Depends(get_app_settings),
):
    """Accept one application: JSON form fields plus resume and optional academics PDFs."""
    if resume is None:
        raise MalformedRequestError("Resume file is required.", field="resume")
    raw = _parse_form_data(data)
    resume_doc = await _read_pdf(resume, "resume", settings.max_upload_bytes)
    academics_doc = None
    if academics is not None and academics.filename:
        academics_doc = await _read_pdf(academics, "academics", settings.max_upload_bytes)

    log = logger.bind(state=SubmissionState.VALIDATING.value)
    try:
        form = validate_form(raw)
    except IntakeError as exc:
        log.info("Submission rejected", state=SubmissionState.FAILED.value, reason=exc.message)
        raise
    log.debug("Form validated", state=SubmissionState.VALIDATED.value)

    documents = await coordinator.upload(resume_doc, academics_doc, str(request.base_url))
    result = await coordinator.submit(form, documents)
    return JSONResponse(status_code=201, content=result.to_response())
