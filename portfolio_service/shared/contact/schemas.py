"""Pydantic schemas for the contact API."""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from portfolio_service.shared.contact.input_validation import (
    sanitize_submission,
    validate_email,
    validate_message,
    validate_name,
    validate_phone,
)


class SubmissionRequest(BaseModel):
    """
    Schema for a contact form submission.

    Fields default to None and are always validated, so a missing field reports
    the same message as an invalid one and every failing field is reported at once.
    """
    name: Optional[str] = Field(None, validate_default=True, description="Sender name")
    number: Optional[str] = Field(None, validate_default=True, description="10-digit phone number")
    email: Optional[str] = Field(None, validate_default=True, description="Sender email address")
    message: Optional[str] = Field(None, validate_default=True, description="Message body")

    @field_validator("name")
    @classmethod
    def validate_name_field(cls, v):
        return validate_name(v)

    @field_validator("number")
    @classmethod
    def validate_number_field(cls, v):
        return validate_phone(v)

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        return validate_email(v)

    @field_validator("message")
    @classmethod
    def validate_message_field(cls, v):
        return validate_message(v)

    def sanitized(self) -> Dict[str, str]:
        return sanitize_submission(self.name, self.number, self.email, self.message)


class SubmissionRecord(BaseModel):
    """A stored submission as echoed back to the client."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    number: str
    email: str
    message: str
    created_at: Optional[datetime] = None


class SubmissionResponse(BaseModel):
    """Schema for a successful submission response."""
    message: str
    data: SubmissionRecord
