from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from schemas.base import CamelModel

GrammarCategory = Literal["verbs", "nouns", "adjectives", "sentence-structure", "other"]


class VocabularyItem(CamelModel):
    id: str
    dutch: str
    english: str
    audio_url: str | None = None
    created_by: str
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(extra="allow")


class VocabularyCreate(CamelModel):
    id: str | None = Field(default=None, min_length=1)
    dutch: str = Field(min_length=1)
    english: str = Field(min_length=1)
    audio_url: str | None = None

    model_config = ConfigDict(extra="allow")


class VocabularyUpdate(CamelModel):
    dutch: str | None = Field(default=None, min_length=1)
    english: str | None = Field(default=None, min_length=1)
    audio_url: str | None = None

    model_config = ConfigDict(extra="allow")


class ConjugationRow(BaseModel):
    pronoun: str
    conjugation: str


class GrammarRule(CamelModel):
    id: str
    title: str
    category: str = "other"
    explanation: str = ""
    examples: list[str] = []
    conjugation_table: list[ConjugationRow] | None = None
    exceptions: list[str] | None = None
    related_rules: list[str] | None = None
    created_by: str
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(extra="allow")


class GrammarRuleCreate(CamelModel):
    id: str | None = Field(default=None, min_length=1)
    title: str = Field(min_length=1)
    category: GrammarCategory = "other"
    explanation: str = ""
    examples: list[str] = []
    conjugation_table: list[ConjugationRow] | None = None
    exceptions: list[str] | None = None
    related_rules: list[str] | None = None

    model_config = ConfigDict(extra="allow")
