"""Schémas Pydantic pour la liste des médicaments."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MedicationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = " ".join(v.split())
        if not v:
            raise ValueError("Nom de médicament vide")
        return v


class MedicationResponse(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class MedicationList(BaseModel):
    items: List[str]
    total: int
