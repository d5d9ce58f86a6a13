"""Pydantic response models (DTOs) for FastAPI endpoints."""

from pydantic import BaseModel, Field


class CanonicalRecordDTO(BaseModel):
    id: str | None = None
    headline: str
    author: str | None = None
    source: str
    createdAt: str | None = None
    url: str
    thumbnail: str | None = None
    bodyPreview: str = ""
    isImage: bool = False

    @classmethod
    def from_record(cls, record):
        """Convert CanonicalRecord to DTO."""
        return cls(**record.to_dict())


class CanonicalReplyDTO(BaseModel):
    id: str | None = None
    author: str
    body: str
    createdAt: str | None = None
    score: int | None = None


class CanonicalThreadDTO(CanonicalRecordDTO):
    replies: list[CanonicalReplyDTO] = Field(default_factory=list)

    @classmethod
    def from_thread(cls, thread):
        """Convert CanonicalThread to DTO, keeping reply order."""
        return cls(**thread.to_dict())


class HealthResponseDTO(BaseModel):
    status: str
    timestamp: str
    version: str = "1.0.0"
