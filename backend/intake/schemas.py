from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

# Skill choices offered by the form; anything else was typed into "other skills".
TECH_SKILL_CHOICES = (
    "Python",
    "Java",
    "C++",
    "JavaScript",
    "Web Development",
    "SQL/Databases",
    "Data Structures & Algorithms",
    "Cloud/DevOps",
    "Machine Learning/AI",
    "Cybersecurity",
)

CHILD_LIST_FIELDS = {"tech_skills", "preferred_locations", "languages"}


class CandidateForm(BaseModel):
    """Normalized submission, built only by `validation.validate_form`.

    Scalar field names are the candidate column names, so the row mapping is a
    plain dump of everything except the three child lists.
    """

    full_name: str
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    mobile_number: str
    alternate_contact_number: Optional[str] = None
    email: str

    current_city: str
    home_town: str
    willing_to_relocate: bool = False
    preferred_city: Optional[str] = None

    highest_qualification: str
    course_name: str
    college_university: str
    affiliated_university: Optional[str] = None
    year_of_passing: int
    aggregate_marks: Optional[Decimal] = None
    all_semesters_cleared: bool = False

    internship_project_experience: bool = False
    project_description: Optional[str] = None
    linkedin_link: Optional[str] = None
    github_link: Optional[str] = None

    preferred_role: str
    immediate_joining: str
    open_to_shifts: bool = False
    expected_ctc: Optional[Decimal] = None
    opportunity_source: Optional[str] = None
    available_for_online_tests: bool = False
    has_laptop_internet: bool = False

    aadhar_number: Optional[str] = None
    pan_no: Optional[str] = None
    passport_available: bool = False
    certificate_name: Optional[str] = None

    tech_skills: List[str] = []
    preferred_locations: List[str] = []
    languages: List[str] = []

    def candidate_columns(self) -> dict:
        return self.model_dump(exclude=CHILD_LIST_FIELDS)


class SubmissionResult(BaseModel):
    candidate_id: int
    resume_url: str
    academics_url: Optional[str] = None

    def to_response(self) -> dict:
        return {
            "success": True,
            "candidateId": self.candidate_id,
            "resumeUrl": self.resume_url,
            "academicsUrl": self.academics_url,
        }


class CandidateRecord(BaseModel):
    """Full record, keyed like the submitted form."""

    candidate_id: int = Field(validation_alias="id")
    full_name: str = Field(serialization_alias="fullName")
    date_of_birth: Optional[date] = Field(None, serialization_alias="dob")
    gender: Optional[str] = None
    mobile_number: str = Field(serialization_alias="mobile")
    alternate_contact_number: Optional[str] = Field(None, serialization_alias="altMobile")
    email: str
    current_city: str = Field(serialization_alias="currentCity")
    home_town: str = Field(serialization_alias="homeTown")
    willing_to_relocate: bool = Field(serialization_alias="willingToRelocate")
    preferred_city: Optional[str] = Field(None, serialization_alias="preferredCity")
    highest_qualification: str = Field(serialization_alias="qualification")
    course_name: str = Field(serialization_alias="course")
    college_university: str = Field(serialization_alias="college")
    affiliated_university: Optional[str] = Field(None, serialization_alias="affiliatedUniv")
    year_of_passing: int = Field(serialization_alias="graduationYear")
    aggregate_marks: Optional[float] = Field(None, serialization_alias="marks")
    all_semesters_cleared: bool = Field(serialization_alias="allSemCleared")
    internship_project_experience: bool = Field(serialization_alias="hasInternship")
    project_description: Optional[str] = Field(None, serialization_alias="projectDesc")
    linkedin_link: Optional[str] = Field(None, serialization_alias="linkedin")
    github_link: Optional[str] = Field(None, serialization_alias="github")
    preferred_role: str = Field(serialization_alias="preferredRole")
    immediate_joining: str = Field(serialization_alias="joining")
    open_to_shifts: bool = Field(serialization_alias="shifts")
    expected_ctc: Optional[float] = Field(None, serialization_alias="expectedCTC")
    opportunity_source: Optional[str] = Field(None, serialization_alias="source")
    available_for_online_tests: bool = Field(serialization_alias="onlineTest")
    has_laptop_internet: bool = Field(serialization_alias="laptop")
    resume_path: str = Field(serialization_alias="resume")
    academic_docs_path: Optional[str] = Field(None, serialization_alias="academics")
    aadhar_number: Optional[str] = Field(None, serialization_alias="aadhar")
    pan_no: Optional[str] = Field(None, serialization_alias="pan")
    passport_available: bool = Field(serialization_alias="passport")
    certificate_name: Optional[str] = Field(None, serialization_alias="certifications")
    created_at: Optional[datetime] = None

    tech_skills: List[str] = Field([], serialization_alias="techSkills")
    other_tech_skills: Optional[str] = Field(None, serialization_alias="otherTechSkills")
    preferred_locations: List[str] = Field([], serialization_alias="preferredLocations")
    languages: List[str] = []


class CandidateSummary(BaseModel):
    id: int
    full_name: str = Field(serialization_alias="fullName")
    email: str
    mobile_number: str = Field(serialization_alias="mobileNumber")
    current_city: str = Field(serialization_alias="currentCity")
    highest_qualification: str = Field(serialization_alias="highestQualification")
    course_name: str = Field(serialization_alias="courseName")
    college_university: str = Field(serialization_alias="collegeUniversity")
    year_of_passing: int = Field(serialization_alias="yearOfPassing")
    aggregate_marks: Optional[float] = Field(None, serialization_alias="aggregateMarks")
    preferred_role: str = Field(serialization_alias="preferredRole")
    expected_ctc: Optional[float] = Field(None, serialization_alias="expectedCTC")
    resume_path: str = Field(serialization_alias="resumePath")
    academic_docs_path: Optional[str] = Field(None, serialization_alias="academicDocsPath")
    created_at: Optional[datetime] = Field(None, serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(None, serialization_alias="updatedAt")
    skills: List[str] = []
    preferred_locations: List[str] = Field([], serialization_alias="preferredLocations")
    languages: List[str] = []


class Pagination(BaseModel):
    current_page: int = Field(serialization_alias="currentPage")
    total_pages: int = Field(serialization_alias="totalPages")
    total_candidates: int = Field(serialization_alias="totalCandidates")
    limit: int
