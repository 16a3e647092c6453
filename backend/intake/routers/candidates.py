from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import queries
from ..deps import get_db
from ..errors import MalformedRequestError, NotFoundError

router = APIRouter()


def _candidate_id(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise MalformedRequestError("Invalid candidate ID")


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value < 1:
        raise MalformedRequestError("Invalid pagination parameters")
    return value


@router.get("/candidate/{candidate_id}")
def get_candidate_info(candidate_id: str, db: Session = Depends(get_db)):
    """Full record shaped like the submitted form, null fields omitted."""
    cand = queries.get_candidate(db, _candidate_id(candidate_id))
    if not cand:
        raise NotFoundError("Candidate not found")
    return {"success": True, "data": queries.to_record(cand).model_dump(by_alias=True, exclude_none=True)}


@router.get("/api/candidates")
def list_candidates(
    page: str = "1",
    limit: str = "10",
    email: Optional[str] = None,
    fullName: Optional[str] = None,
    db: Session = Depends(get_db),
):
    rows, pagination = queries.list_candidates(
        db, _positive_int(page), _positive_int(limit), email=email, full_name=fullName
    )
    return {
        "success": True,
        "data": [queries.to_record(c).model_dump(by_alias=True, exclude_none=True) for c in rows],
        "pagination": pagination.model_dump(by_alias=True),
    }


@router.get("/api/candidates/{candidate_id}")
def get_candidate_summary(candidate_id: str, db: Session = Depends(get_db)):
    cand = queries.get_candidate(db, _candidate_id(candidate_id))
    if not cand:
        raise NotFoundError("Candidate not found")
    return queries.to_summary(cand).model_dump(by_alias=True)
