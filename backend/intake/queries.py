import math
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from .models import Candidate
from .schemas import TECH_SKILL_CHOICES, CandidateRecord, CandidateSummary, Pagination


def _with_children():
    return (
        selectinload(Candidate.skills),
        selectinload(Candidate.preferred_locations),
        selectinload(Candidate.languages),
    )


def _columns(cand: Candidate) -> dict:
    return {column.key: getattr(cand, column.key) for column in Candidate.__table__.columns}


def _child_lists(cand: Candidate) -> dict:
    return {
        "skills": [s.skill_name for s in cand.skills],
        "preferred_locations": [p.job_location for p in cand.preferred_locations],
        "languages": [l.language_name for l in cand.languages],
    }


def to_record(cand: Candidate) -> CandidateRecord:
    children = _child_lists(cand)
    skills = children.pop("skills")
    other = [s for s in skills if s not in TECH_SKILL_CHOICES]
    return CandidateRecord.model_validate({
        **_columns(cand),
        **children,
        "tech_skills": skills,
        "other_tech_skills": ", ".join(other) or None,
    })


def to_summary(cand: Candidate) -> CandidateSummary:
    return CandidateSummary.model_validate({**_columns(cand), **_child_lists(cand)})


def get_candidate(db: Session, candidate_id: int) -> Optional[Candidate]:
    stmt = select(Candidate).options(*_with_children()).where(Candidate.id == candidate_id)
    return db.execute(stmt).scalar_one_or_none()


def _contains(column, text: str):
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return column.ilike(f"%{escaped}%", escape="\\")


def list_candidates(
    db: Session,
    page: int,
    limit: int,
    email: Optional[str] = None,
    full_name: Optional[str] = None,
) -> Tuple[List[Candidate], Pagination]:
    filters = []
    if email:
        filters.append(_contains(Candidate.email, email))
    if full_name:
        filters.append(_contains(Candidate.full_name, full_name))

    total = db.execute(select(func.count(Candidate.id)).where(*filters)).scalar_one()
    stmt = (
        select(Candidate)
        .options(*_with_children())
        .where(*filters)
        .order_by(Candidate.created_at.desc(), Candidate.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    rows = list(db.execute(stmt).scalars().all())
    pagination = Pagination(
        current_page=page,
        total_pages=math.ceil(total / limit),
        total_candidates=total,
        limit=limit,
    )
    return rows, pagination
