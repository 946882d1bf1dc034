# user_registration/services/validation.py
"""
Input validation pipeline.

Each field has an ordered list of pure rules. A rule returns an error
message or ``None``; the first failing rule of a field produces one
``FieldError`` and the remaining fields are still checked, so a client gets
every shape problem in a single response.

Business rules that need storage (uniqueness, role existence) are not here;
the services run them afterwards, fail-fast.
"""
import re
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

from email_validator import EmailNotValidError, validate_email

from user_registration.core.errors import FieldError
from user_registration.models.role import canonical_role_name
from user_registration.schemas.user import ProfileUpdateIn, RegistrationIn

Rule = Callable[[Any], Optional[str]]

NAME_RE = re.compile(r"^[a-zA-Z\s]+$")
PHONE_RE = re.compile(r"^\+?[1-9]\d{1,14}$")
COUNTRY_RE = re.compile(r"^[A-Z]{2}$")

EMAIL_MAX_LENGTH = 255
MIN_ROLES = 1
MAX_ROLES = 3

# Never echo these back in a FieldError
SECRET_FIELDS = frozenset({"password", "confirmPassword", "currentPassword", "newPassword", "confirmNewPassword"})


# ---------------------------------------------------------------------------
# Normalizers
# ---------------------------------------------------------------------------
def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def normalize_optional(value: Optional[str]) -> Optional[str]:
    """Strip a value; blank becomes None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize_country(country: Optional[str]) -> Optional[str]:
    country = normalize_optional(country)
    return country.upper() if country else None


def distinct_role_names(names: Iterable[str]) -> List[str]:
    """Drop blanks and names equal under the canonical form, keeping first spelling."""
    seen = set()
    result = []
    for name in names:
        key = canonical_role_name(name)
        if key and key not in seen:
            seen.add(key)
            result.append(name.strip())
    return result


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------
def required(label: str) -> Rule:
    def rule(value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return f"{label} is required"
        return None
    return rule


def length_between(label: str, lo: int, hi: int) -> Rule:
    def rule(value):
        if value is not None and not lo <= len(value.strip()) <= hi:
            return f"{label} must be between {lo} and {hi} characters"
        return None
    return rule


def letters_only(label: str) -> Rule:
    def rule(value):
        if value is not None and not NAME_RE.match(value.strip()):
            return f"{label} must contain only letters and spaces"
        return None
    return rule


def valid_email(value) -> Optional[str]:
    if value is None:
        return None
    email = normalize_email(value)
    if len(email) > EMAIL_MAX_LENGTH:
        return f"Email must not exceed {EMAIL_MAX_LENGTH} characters"
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return "Please provide a valid email address"
    return None


def valid_phone(value) -> Optional[str]:
    phone = normalize_optional(value)
    if phone is not None and not PHONE_RE.match(phone):
        return "Please provide a valid phone number with country code"
    return None


def valid_country(value) -> Optional[str]:
    country = normalize_country(value)
    if country is not None and not COUNTRY_RE.match(country):
        return "Country must be a valid 2-letter ISO country code"
    return None


def role_count(value) -> Optional[str]:
    count = len(distinct_role_names(value or []))
    if count < MIN_ROLES:
        return "At least one role must be selected"
    if count > MAX_ROLES:
        return f"You can select between {MIN_ROLES} and {MAX_ROLES} roles"
    return None


def _optional(*rules: Rule) -> List[Rule]:
    """Apply rules only when a value was supplied."""
    def wrap(rule: Rule) -> Rule:
        return lambda value: None if value is None else rule(value)
    return [wrap(r) for r in rules]


# ---------------------------------------------------------------------------
# Pipelines
# ---------------------------------------------------------------------------
Check = Tuple[str, Any, Sequence[Rule]]


def run_checks(checks: Iterable[Check]) -> List[FieldError]:
    errors: List[FieldError] = []
    for field, value, rules in checks:
        for rule in rules:
            message = rule(value)
            if message:
                rejected = None if field in SECRET_FIELDS else value
                errors.append(FieldError(field, message, rejected))
                break
    return errors


def validate_registration(data: RegistrationIn) -> List[FieldError]:
    """Shape checks for a registration request. Password policy is checked later."""
    return run_checks([
        ("firstName", data.firstName,
         [required("First name"), length_between("First name", 2, 100), letters_only("First name")]),
        ("lastName", data.lastName,
         [required("Last name"), length_between("Last name", 2, 100), letters_only("Last name")]),
        ("email", data.email, [required("Email"), valid_email]),
        ("password", data.password, [required("Password")]),
        ("confirmPassword", data.confirmPassword, [required("Password confirmation")]),
        ("phoneNumber", data.phoneNumber, [valid_phone]),
        ("country", data.country, [valid_country]),
        ("roles", data.roles, [role_count]),
    ])


def validate_profile_update(data: ProfileUpdateIn) -> List[FieldError]:
    return run_checks([
        ("firstName", data.firstName,
         _optional(length_between("First name", 2, 100), letters_only("First name"))),
        ("lastName", data.lastName,
         _optional(length_between("Last name", 2, 100), letters_only("Last name"))),
        ("phoneNumber", data.phoneNumber, [valid_phone]),
        ("country", data.country, [valid_country]),
    ])
