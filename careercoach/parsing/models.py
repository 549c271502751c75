from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class ExtractedResume(BaseModel):
    filename: str
    source_type: str
    text: str
    page_count: int | None = None
    parsing_warnings: list[str] = Field(default_factory=list)

    @field_validator("source_type")
    @classmethod
    def _validate_source_type(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in {"pdf", "docx"}:
            raise ValueError("source_type must be one of: pdf, docx")
        return normalized

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()
