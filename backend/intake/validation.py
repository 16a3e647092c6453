"""Checks and coercions applied to a raw submission before any I/O."""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional

from .errors import FieldValidationError
from .models import GENDERS
from .schemas import CandidateForm

MAX_MARKS = Decimal("100")
MAX_EXPECTED_CTC = Decimal("9999999.99")
MIN_GRADUATION_YEAR = 1950
GRADUATION_YEARS_AHEAD = 10

YES = "Yes"
OTHERS_PLACEHOLDER = "Others"

# external key -> (column, label)
REQUIRED_TEXT_FIELDS = {
    "fullName": ("full_name", "Full Name"),
    "email": ("email", "Email"),
    "mobile": ("mobile_number", "Mobile Number"),
    "currentCity": ("current_city", "Current City"),
    "homeTown": ("home_town", "Home Town"),
    "qualification": ("highest_qualification", "Highest Qualification"),
    "course": ("course_name", "Course Name"),
    "college": ("college_university", "College/University"),
    "preferredRole": ("preferred_role", "Preferred Role"),
    "joining": ("immediate_joining", "Joining Timeline"),
}

OPTIONAL_TEXT_FIELDS = {
    "altMobile": "alternate_contact_number",
    "affiliatedUniv": "affiliated_university",
    "projectDesc": "project_description",
    "linkedin": "linkedin_link",
    "github": "github_link",
    "source": "opportunity_source",
    "aadhar": "aadhar_number",
    "pan": "pan_no",
    "certifications": "certificate_name",
}

YES_FLAGS = {
    "willingToRelocate": "willing_to_relocate",
    "allSemCleared": "all_semesters_cleared",
    "hasInternship": "internship_project_experience",
    "shifts": "open_to_shifts",
    "onlineTest": "available_for_online_tests",
    "laptop": "has_laptop_internet",
    "passport": "passport_available",
}


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def validate_numeric_field(value: Any, field_name: str, max_value: Decimal, precision: int) -> Optional[Decimal]:
    """Parse an optional decimal, enforce `max_value` and round to `precision` digits.

    Empty input means the field was left blank and yields None. Extra decimal
    digits are rounded, never rejected.
    """
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    if not text:
        return None
    invalid = FieldValidationError(f"Invalid {field_name}: must be a valid number", field=field_name)
    try:
        number = Decimal(text)
    except InvalidOperation:
        raise invalid
    if not number.is_finite():
        raise invalid
    if number > max_value:
        raise FieldValidationError(
            f"{field_name} exceeds maximum allowed value ({max_value})", field=field_name
        )
    try:
        return number.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # more digits than the decimal context holds
        raise invalid


def validate_graduation_year(value: Any, today: Optional[date] = None) -> int:
    today = today or date.today()
    latest = today.year + GRADUATION_YEARS_AHEAD
    if value is None or isinstance(value, bool) or not str(value).strip():
        raise FieldValidationError("Graduation Year is required", field="graduationYear")
    try:
        year = int(str(value).strip())
    except ValueError:
        year = None
    if year is None or not MIN_GRADUATION_YEAR <= year <= latest:
        raise FieldValidationError(
            f"Graduation Year must be between {MIN_GRADUATION_YEAR} and {latest}",
            field="graduationYear",
        )
    return year


def validate_date_of_birth(value: Any) -> Optional[date]:
    text = _text(value)
    if text is None:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        raise FieldValidationError("Invalid Date of Birth: expected YYYY-MM-DD", field="dob")


def normalize_gender(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    gender = value.strip().lower()
    return gender if gender in GENDERS else None


def is_yes(value: Any) -> bool:
    return value == YES


def clean_list(values: Any) -> List[str]:
    """Stripped, non-blank entries in submitted order; repeats are kept."""
    if not isinstance(values, (list, tuple)):
        return []
    cleaned: List[str] = []
    for value in values:
        text = _text(value)
        if text is not None:
            cleaned.append(text)
    return cleaned


def merge_skills(tech_skills: Iterable[str], other_tech_skills: Any) -> List[str]:
    """Append the comma-separated free-text skills and drop the "Others" choice."""
    skills = list(tech_skills)
    if isinstance(other_tech_skills, str):
        skills.extend(part.strip() for part in other_tech_skills.split(","))
    return [skill for skill in clean_list(skills) if skill != OTHERS_PLACEHOLDER]


def _required_text(raw: Dict[str, Any], key: str, label: str) -> str:
    text = _text(raw.get(key))
    if text is None:
        raise FieldValidationError(f"{label} is required", field=key)
    return text


def validate_form(raw: Dict[str, Any], today: Optional[date] = None) -> CandidateForm:
    """Turn the decoded JSON form into a `CandidateForm` or raise `FieldValidationError`."""
    fields: Dict[str, Any] = {}

    for key, (column, label) in REQUIRED_TEXT_FIELDS.items():
        fields[column] = _required_text(raw, key, label)
    if "@" not in fields["email"]:
        raise FieldValidationError("Email must be a valid email address", field="email")

    for key, column in OPTIONAL_TEXT_FIELDS.items():
        fields[column] = _text(raw.get(key))
    for key, column in YES_FLAGS.items():
        fields[column] = is_yes(raw.get(key))

    fields["date_of_birth"] = validate_date_of_birth(raw.get("dob"))
    fields["gender"] = normalize_gender(raw.get("gender"))
    fields["year_of_passing"] = validate_graduation_year(raw.get("graduationYear"), today=today)
    fields["aggregate_marks"] = validate_numeric_field(raw.get("marks"), "Aggregate Marks/CGPA", MAX_MARKS, 2)
    fields["expected_ctc"] = validate_numeric_field(raw.get("expectedCTC"), "Expected CTC", MAX_EXPECTED_CTC, 2)

    preferred_locations = clean_list(raw.get("preferredLocations"))
    fields["preferred_locations"] = preferred_locations
    fields["preferred_city"] = ", ".join(preferred_locations) or None
    fields["tech_skills"] = merge_skills(clean_list(raw.get("techSkills")), raw.get("otherTechSkills"))
    fields["languages"] = clean_list(raw.get("languages"))

    return CandidateForm(**fields)
