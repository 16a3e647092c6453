"""The submission transaction: one candidate row plus its child rows, or nothing."""

import time
from enum import Enum
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from .db import Database
from .errors import SubmissionTimeoutError, translate_store_error
from .logging import get_logger
from .models import Candidate, CandidateLanguage, CandidatePreferredLocation, CandidateSkill
from .schemas import CandidateForm, SubmissionResult
from .storage import IncomingDocument, StoredDocuments

logger = get_logger(__name__)

# (model, name column, CandidateForm list attribute)
CHILD_COLLECTIONS = (
    (CandidateSkill, "skill_name", "tech_skills"),
    (CandidatePreferredLocation, "job_location", "preferred_locations"),
    (CandidateLanguage, "language_name", "languages"),
)


class SubmissionState(str, Enum):
    VALIDATING = "validating"
    VALIDATED = "validated"
    FAILED = "failed"
    TRANSACTION_OPEN = "transaction_open"
    ROWS_INSERTED = "rows_inserted"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class Deadline:
    def __init__(self, seconds: float) -> None:
        self.seconds = seconds
        self.expires_at = time.monotonic() + seconds

    def check(self) -> None:
        if time.monotonic() > self.expires_at:
            raise SubmissionTimeoutError(f"Submission did not complete within {self.seconds:g} seconds")


class SubmissionCoordinator:
    def __init__(self, database: Database, storage, timeout: float = 30.0) -> None:
        self.database = database
        self.storage = storage
        self.timeout = timeout

    async def upload(
        self,
        resume: IncomingDocument,
        academics: Optional[IncomingDocument],
        base_url: str,
    ) -> StoredDocuments:
        """Store the documents; a failed academics upload removes the resume again."""
        documents = StoredDocuments(resume=await self.storage.save(resume, base_url))
        if academics is not None:
            try:
                documents.academics = await self.storage.save(academics, base_url)
            except Exception:
                await self.discard(documents)
                raise
        logger.info("Documents stored", resume=documents.resume.url,
                    academics=documents.academics.url if documents.academics else None)
        return documents

    async def submit(self, form: CandidateForm, documents: StoredDocuments) -> SubmissionResult:
        deadline = Deadline(self.timeout)
        try:
            candidate_id = await run_in_threadpool(self._write, form, documents, deadline)
        except Exception as exc:
            logger.warning("Submission rolled back", state=SubmissionState.ROLLED_BACK.value,
                           error=type(exc).__name__)
            await self.discard(documents)
            raise

        logger.info("Submission committed", state=SubmissionState.COMMITTED.value, candidate_id=candidate_id)
        return SubmissionResult(
            candidate_id=candidate_id,
            resume_url=documents.resume.url,
            academics_url=documents.academics.url if documents.academics else None,
        )

    def _write(self, form: CandidateForm, documents: StoredDocuments, deadline: Deadline) -> int:
        try:
            with self.database.transaction() as session:
                logger.debug("Transaction opened", state=SubmissionState.TRANSACTION_OPEN.value)
                deadline.check()
                candidate = Candidate(
                    **form.candidate_columns(),
                    resume_path=documents.resume.url,
                    academic_docs_path=documents.academics.url if documents.academics else None,
                )
                session.add(candidate)
                session.flush()

                for model, column, attribute in CHILD_COLLECTIONS:
                    for value in getattr(form, attribute):
                        deadline.check()
                        session.add(model(candidate_id=candidate.id, **{column: value}))
                        session.flush()

                logger.debug("Rows inserted", state=SubmissionState.ROWS_INSERTED.value, candidate_id=candidate.id)
                deadline.check()
                return candidate.id
        except SQLAlchemyError as exc:
            logger.error("Store rejected submission", error=str(getattr(exc, "orig", exc)))
            raise translate_store_error(exc) from exc

    async def discard(self, documents: StoredDocuments) -> None:
        """Best-effort removal of stored documents; failures are only logged."""
        for document in documents.all():
            try:
                await self.storage.delete(document)
            except Exception as exc:
                logger.error("Document cleanup failed", field=document.field, key=document.key, error=str(exc))
