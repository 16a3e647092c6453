from sqlalchemy import Boolean, Column, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import relationship

from .db import Base

GENDERS = ("male", "female", "other")


class Candidate(Base):
    __tablename__ = "candidates"
    id = Column(Integer, primary_key=True, index=True)

    full_name = Column(String(255), nullable=False, index=True)
    date_of_birth = Column(Date)
    gender = Column(Enum(*GENDERS, name="candidate_gender", create_constraint=True))
    mobile_number = Column(String(15), nullable=False, index=True)
    alternate_contact_number = Column(String(15))
    email = Column(String(255), nullable=False, unique=True, index=True)

    current_city = Column(String(100), nullable=False)
    home_town = Column(String(100), nullable=False)
    willing_to_relocate = Column(Boolean, default=False, nullable=False)
    preferred_city = Column(Text)

    highest_qualification = Column(String(100), nullable=False)
    course_name = Column(String(100), nullable=False)
    college_university = Column(String(255), nullable=False)
    affiliated_university = Column(String(255))
    year_of_passing = Column(Integer, nullable=False)
    aggregate_marks = Column(Numeric(5, 2))
    all_semesters_cleared = Column(Boolean, default=False, nullable=False)

    internship_project_experience = Column(Boolean, default=False, nullable=False)
    project_description = Column(Text)
    linkedin_link = Column(String(255))
    github_link = Column(String(255))

    preferred_role = Column(String(100), nullable=False)
    immediate_joining = Column(String(50), nullable=False)
    open_to_shifts = Column(Boolean, default=False, nullable=False)
    expected_ctc = Column(Numeric(10, 2))
    opportunity_source = Column(String(100))
    available_for_online_tests = Column(Boolean, default=False, nullable=False)
    has_laptop_internet = Column(Boolean, default=False, nullable=False)

    resume_path = Column(String(500), nullable=False)
    academic_docs_path = Column(String(500))

    aadhar_number = Column(String(12))
    pan_no = Column(String(10))
    passport_available = Column(Boolean, default=False, nullable=False)
    certificate_name = Column(Text)

    created_at = Column(DateTime, server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    skills = relationship(
        "CandidateSkill", back_populates="candidate", cascade="all, delete-orphan",
        passive_deletes=True, order_by="CandidateSkill.id",
    )
    preferred_locations = relationship(
        "CandidatePreferredLocation", back_populates="candidate", cascade="all, delete-orphan",
        passive_deletes=True, order_by="CandidatePreferredLocation.id",
    )
    languages = relationship(
        "CandidateLanguage", back_populates="candidate", cascade="all, delete-orphan",
        passive_deletes=True, order_by="CandidateLanguage.id",
    )


class CandidateSkill(Base):
    __tablename__ = "candidate_skills"
    id = Column(Integer, primary_key=True)
    candidate_id = Column(Integer, ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False, index=True)
    skill_name = Column(String(100), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    candidate = relationship("Candidate", back_populates="skills")


class CandidatePreferredLocation(Base):
    __tablename__ = "candidate_preferred_job_locations"
    id = Column(Integer, primary_key=True)
    candidate_id = Column(Integer, ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False, index=True)
    job_location = Column(String(100), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    candidate = relationship("Candidate", back_populates="preferred_locations")


class CandidateLanguage(Base):
    __tablename__ = "candidate_languages_known"
    id = Column(Integer, primary_key=True)
    candidate_id = Column(Integer, ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False, index=True)
    language_name = Column(String(50), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    candidate = relationship("Candidate", back_populates="languages")
