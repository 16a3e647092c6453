"""Error taxonomy for the intake pipeline and translation of store errors."""

import re
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError


class ErrorKind(str, Enum):
    MALFORMED_REQUEST = "malformed_request"
    VALIDATION = "validation_error"
    CONFLICT = "conflict"
    FIELD_TOO_LONG = "field_too_long"
    OUT_OF_RANGE = "out_of_range"
    NOT_FOUND = "not_found"
    STORAGE = "storage_error"
    TIMEOUT = "timeout"
    SERVER = "server_error"


class IntakeError(Exception):
    """Base class for errors rendered as the failure envelope."""

    kind = ErrorKind.SERVER
    status_code = 500

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self, include_details: bool = False) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "success": False,
            "error": self.kind.value,
            "message": self.message,
        }
        if self.field:
            body["field"] = self.field
        if include_details and self.__cause__ is not None:
            body["details"] = str(self.__cause__)
        return body


class MalformedRequestError(IntakeError):
    kind = ErrorKind.MALFORMED_REQUEST
    status_code = 400


class FieldValidationError(IntakeError):
    kind = ErrorKind.VALIDATION
    status_code = 400


class ConflictError(IntakeError):
    kind = ErrorKind.CONFLICT
    status_code = 409


class FieldTooLongError(IntakeError):
    kind = ErrorKind.FIELD_TOO_LONG
    status_code = 400


class OutOfRangeError(IntakeError):
    kind = ErrorKind.OUT_OF_RANGE
    status_code = 400


class NotFoundError(IntakeError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404


class StorageError(IntakeError):
    kind = ErrorKind.STORAGE
    status_code = 502


class SubmissionTimeoutError(IntakeError):
    kind = ErrorKind.TIMEOUT
    status_code = 504


class StoreFailure(IntakeError):
    kind = ErrorKind.SERVER
    status_code = 500


class StoreErrorKind(Enum):
    UNIQUE_VIOLATION = "unique_violation"
    FOREIGN_KEY_VIOLATION = "foreign_key_violation"
    VALUE_TOO_LONG = "value_too_long"
    NUMERIC_OUT_OF_RANGE = "numeric_out_of_range"
    OTHER = "other"


# PostgreSQL SQLSTATE codes
_SQLSTATE_KINDS = {
    "23505": StoreErrorKind.UNIQUE_VIOLATION,
    "23503": StoreErrorKind.FOREIGN_KEY_VIOLATION,
    "22001": StoreErrorKind.VALUE_TOO_LONG,
    "22003": StoreErrorKind.NUMERIC_OUT_OF_RANGE,
}

# MySQL / MariaDB server error numbers
_MYSQL_KINDS = {
    1062: StoreErrorKind.UNIQUE_VIOLATION,
    1452: StoreErrorKind.FOREIGN_KEY_VIOLATION,
    1406: StoreErrorKind.VALUE_TOO_LONG,
    1264: StoreErrorKind.NUMERIC_OUT_OF_RANGE,
}

# SQLite extended result codes
_SQLITE_KINDS = {
    "SQLITE_CONSTRAINT_UNIQUE": StoreErrorKind.UNIQUE_VIOLATION,
    "SQLITE_CONSTRAINT_PRIMARYKEY": StoreErrorKind.UNIQUE_VIOLATION,
    "SQLITE_CONSTRAINT_FOREIGNKEY": StoreErrorKind.FOREIGN_KEY_VIOLATION,
    "SQLITE_TOOBIG": StoreErrorKind.VALUE_TOO_LONG,
}

# Column name -> label used in client-facing messages
FIELD_LABELS = {
    "email": "Email",
    "full_name": "Full Name",
    "mobile_number": "Mobile Number",
    "alternate_contact_number": "Alternate Contact Number",
    "current_city": "Current City",
    "home_town": "Home Town",
    "highest_qualification": "Highest Qualification",
    "course_name": "Course Name",
    "college_university": "College/University",
    "affiliated_university": "Affiliated University",
    "year_of_passing": "Graduation Year",
    "aggregate_marks": "Aggregate Marks/CGPA",
    "expected_ctc": "Expected CTC",
    "linkedin_link": "LinkedIn Link",
    "github_link": "GitHub Link",
    "preferred_role": "Preferred Role",
    "immediate_joining": "Joining Timeline",
    "opportunity_source": "Opportunity Source",
    "aadhar_number": "Aadhar Number",
    "pan_no": "PAN Number",
    "skill_name": "Technical Skill",
    "job_location": "Preferred Location",
    "language_name": "Language",
}

_COLUMN_PATTERN = re.compile(
    r"(?<![A-Za-z0-9])(" + "|".join(sorted(FIELD_LABELS, key=len, reverse=True)) + r")(?![A-Za-z0-9])"
)


def classify_store_error(exc: SQLAlchemyError) -> StoreErrorKind:
    """Derive the error kind from the driver's structured error code."""
    orig = getattr(exc, "orig", None)
    if orig is None:
        return StoreErrorKind.OTHER

    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate in _SQLSTATE_KINDS:
        return _SQLSTATE_KINDS[sqlstate]

    errname = getattr(orig, "sqlite_errorname", None)
    if errname in _SQLITE_KINDS:
        return _SQLITE_KINDS[errname]
    if errname == "SQLITE_CONSTRAINT":
        # Extended codes disabled; the constraint type leads the message.
        text = str(orig)
        if text.startswith("UNIQUE"):
            return StoreErrorKind.UNIQUE_VIOLATION
        if text.startswith("FOREIGN KEY"):
            return StoreErrorKind.FOREIGN_KEY_VIOLATION

    args = getattr(orig, "args", ())
    if args and isinstance(args[0], int) and args[0] in _MYSQL_KINDS:
        return _MYSQL_KINDS[args[0]]

    return StoreErrorKind.OTHER


def offending_column(exc: SQLAlchemyError) -> Optional[str]:
    """Best guess at the column an integrity or data error refers to."""
    orig = getattr(exc, "orig", None)
    if orig is None:
        return None
    diag = getattr(orig, "diag", None)
    hints = [
        getattr(diag, "column_name", None),
        getattr(diag, "constraint_name", None),
        str(orig),
    ]
    for hint in hints:
        if not hint:
            continue
        match = _COLUMN_PATTERN.search(hint)
        if match:
            return match.group(1)
    return None


def translate_store_error(exc: SQLAlchemyError) -> IntakeError:
    """Map a store error onto the client-facing taxonomy."""
    kind = classify_store_error(exc)
    column = offending_column(exc)
    label = FIELD_LABELS.get(column) if column else None

    if kind is StoreErrorKind.UNIQUE_VIOLATION:
        column = column or "email"
        label = FIELD_LABELS.get(column, column)
        return ConflictError(f"A candidate with this {label} already exists.", field=column)
    if kind is StoreErrorKind.FOREIGN_KEY_VIOLATION:
        return ConflictError("Referenced candidate does not exist.", field="candidate_id")
    if kind is StoreErrorKind.VALUE_TOO_LONG:
        if label:
            return FieldTooLongError(f"{label} is too long.", field=column)
        return FieldTooLongError("One of the fields is too long.")
    if kind is StoreErrorKind.NUMERIC_OUT_OF_RANGE:
        if label:
            return OutOfRangeError(f"{label} is out of range.", field=column)
        return OutOfRangeError("One of the numeric fields is out of range.")
    return StoreFailure("Failed to submit form")
