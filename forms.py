"""
Form models submitted by the account pages
"""

import re
from typing import Any, Dict, Optional

from pydantic import BaseModel

from errors import ValidationError

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


def validate_email(email: str) -> bool:
    """Validate email format"""
    return EMAIL_PATTERN.match(email) is not None


class RegistrationForm(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str
    company_name: Optional[str] = None
    password: str
    password_confirmation: str

    def validate_locally(self) -> None:
        """
        Checks made before anything is sent. Everything else is validated
        by the auth service.

        Raises:
            ValidationError: the form cannot be submitted as is
        """
        if self.password != self.password_confirmation:
            raise ValidationError("Passwords do not match")
        if not validate_email(self.email):
            raise ValidationError("Invalid email format")

    def to_fields(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class LoginForm(BaseModel):
    email: str
    password: str


class ProfileForm(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company_name: Optional[str] = None

    def to_fields(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
