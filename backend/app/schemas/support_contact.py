"""
Pydantic schemas for SupportContact entity.
"""
from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator
from datetime import datetime


class SupportContactBase(BaseModel):
    """Base support contact schema."""
    name: str
    relationship: str = Field(
        ...,
        validation_alias=AliasChoices("relationship", "relationship_type"),
    )
    email: EmailStr


class SupportContactCreate(SupportContactBase):
    """Schema for support contact registration."""

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Name must be at least 3 characters")
        return v

    @field_validator("relationship")
    @classmethod
    def validate_relationship(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Relationship is required")
        return v


class SupportContactResponse(SupportContactBase):
    """Schema for support contact response."""
    id: str
    user_id: str
    created_at: datetime

    class Config:
        from_attributes = True
