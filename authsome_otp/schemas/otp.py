from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from authsome_otp.config import settings
from authsome_otp.models.record import OtpRecord
from authsome_otp.services.generator import (
    CHARACTER_CLASSES,
    GeneratorOptions,
    configured_rule,
    default_options,
)

CharacterClassName = Literal["numeric", "alphabetic"]


class ClassRuleRequest(BaseModel):
    character_class: CharacterClassName
    min_count: Optional[int] = Field(default=None, ge=0)
    max_count: Optional[int] = Field(default=None, ge=0)


class GenerateRequest(BaseModel):
    classes: Optional[list[ClassRuleRequest]] = None
    length: int = settings.otp_length

    def to_options(self) -> GeneratorOptions:
        if self.classes is None:
            return GeneratorOptions(rules=default_options().rules, length=self.length)
        rules = tuple(
            configured_rule(
                CHARACTER_CLASSES[rule.character_class],
                min_count=rule.min_count,
                max_count=rule.max_count,
            )
            for rule in self.classes
        )
        return GeneratorOptions(rules=rules, length=self.length)


class GenerateResponse(BaseModel):
    code: str


class IssueRequest(BaseModel):
    parent_source: str = Field(min_length=1, max_length=100)
    parent_id: str = Field(min_length=1, max_length=255)
    metadata: Optional[dict[str, Any]] = None
    ttl_seconds: int = 0
    options: GenerateRequest = Field(default_factory=GenerateRequest)


class IssueResponse(BaseModel):
    id: int
    expires_at: int
    expires_in_seconds: int
    code: Optional[str] = None


class ValidateRequest(BaseModel):
    code: str = Field(min_length=1, max_length=20)
    parent_source: str = Field(min_length=1, max_length=100)
    parent_id: str = Field(min_length=1, max_length=255)


class OtpRecordResponse(BaseModel):
    id: int
    parent_source: str
    parent_id: str
    metadata: Optional[dict[str, Any]] = None
    created_at: int
    expires_at: int

    @classmethod
    def from_record(cls, record: OtpRecord) -> "OtpRecordResponse":
        return cls(
            id=record.id,
            parent_source=record.parent_source,
            parent_id=record.parent_id,
            metadata=record.metadata,
            created_at=record.created_at,
            expires_at=record.expires_at,
        )


class SweepResponse(BaseModel):
    deleted: int


class MessageResponse(BaseModel):
    message: str
