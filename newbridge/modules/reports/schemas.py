"""Pydantic v2 schemas for resource issue reports."""

from pydantic import BaseModel, Field, field_validator


class IssueReportCreate(BaseModel):
    resource_id: str = Field(..., max_length=100)
    issue_type: str = Field(..., max_length=100)
    description: str = Field(..., max_length=5000)
    resource_name: str | None = Field(None, max_length=255)
    resource_address: str | None = Field(None, max_length=500)
    reporter_email: str | None = Field(None, max_length=255)
    timestamp: str | None = None

    @field_validator("resource_id", "issue_type", "description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class IssueReportResponse(BaseModel):
    success: bool = True
    message: str = "Report submitted successfully"
