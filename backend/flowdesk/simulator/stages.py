"""
Pipeline stages — pure transforms of the registration pipeline.

Each stage takes the previous stage's output and returns its own;
none of them sleeps, logs or publishes. ``generate_user`` draws from
an injected ``random.Random`` so runs can be reproduced.
"""

from __future__ import annotations

import random
import re
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

NAMES = ["Alex", "Jamie", "Taylor", "Sam", "Jordan", "Morgan"]
REGIONS = ["US", "EU", "Asia"]

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MINIMUM_AGE = 18

INVALID_EMAIL_ERROR = "Invalid email"
UNDER_AGE_ERROR = "User under 18"

REGION_POLICIES = {
    "US": "GDPR Not Required",
    "EU": "GDPR Required",
    "Asia": "APAC Policy",
}
DEFAULT_REGION_POLICY = "Generic"

FAILED_AT_VALIDATION = "validation"


# ============================================================================
# Records
# ============================================================================


class UserRecord(BaseModel):
    """A registration submitted to the pipeline."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = ""
    email: str = ""
    age: int = 0
    region: str = ""
    registration_date: str = Field("", alias="registrationDate")

    def to_output(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ValidationResult(BaseModel):
    errors: List[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


class ErrorResult(UserRecord):
    validation: ValidationResult
    failed_at: str = Field(FAILED_AT_VALIDATION, alias="failedAt")


class RegionResult(UserRecord):
    region_policy: str = Field(..., alias="regionPolicy")


class EmailResult(RegionResult):
    welcome_message: str = Field(..., alias="welcomeMessage")


UserLike = Union[UserRecord, Mapping[str, Any]]


def as_user(user: UserLike) -> UserRecord:
    if isinstance(user, UserRecord):
        return user
    return UserRecord.model_validate(dict(user))


# ============================================================================
# Stages
# ============================================================================


def generate_user(
    rng: random.Random,
    now: Optional[datetime] = None,
) -> UserRecord:
    """Synthesize a registration.

    Roughly 30% of users are under age (10–19) and 20% get a
    malformed email, so both pipeline branches are exercised.
    """
    if rng.random() < 0.3:
        age = rng.randrange(10, 20)
    else:
        age = rng.randrange(18, 43)
    if rng.random() < 0.2:
        email = "invalid-email"
    else:
        email = rng.choice(NAMES).lower() + "@example.com"
    now = now or datetime.now(timezone.utc)
    return UserRecord(
        name=rng.choice(NAMES),
        email=email,
        region=rng.choice(REGIONS),
        age=age,
        registrationDate=now.isoformat(),
    )


def validate_user(user: UserLike) -> ValidationResult:
    """Run every check; failures are reported together, email first."""
    user = as_user(user)
    errors: List[str] = []
    if not EMAIL_PATTERN.fullmatch(user.email or ""):
        errors.append(INVALID_EMAIL_ERROR)
    if user.age < MINIMUM_AGE:
        errors.append(UNDER_AGE_ERROR)
    return ValidationResult(errors=errors)


def handle_error(user: UserLike, validation: ValidationResult) -> ErrorResult:
    """Terminal stage of the failure branch."""
    user = as_user(user)
    return ErrorResult.model_validate({
        **user.model_dump(by_alias=True),
        "validation": validation,
        "failedAt": FAILED_AT_VALIDATION,
    })


def process_region(user: UserLike) -> RegionResult:
    """Attach the data-protection policy of the user's region."""
    user = as_user(user)
    policy = REGION_POLICIES.get(user.region, DEFAULT_REGION_POLICY)
    return RegionResult.model_validate({
        **user.model_dump(by_alias=True),
        "regionPolicy": policy,
    })


def send_email(region_result: Union[RegionResult, Mapping[str, Any]]) -> EmailResult:
    """Render the welcome message. Nothing is sent."""
    if not isinstance(region_result, RegionResult):
        region_result = RegionResult.model_validate(dict(region_result))
    message = (
        f"Dear {region_result.name},\n"
        f"Welcome to our {region_result.region} community!"
    )
    return EmailResult.model_validate({
        **region_result.model_dump(by_alias=True),
        "welcomeMessage": message,
    })
