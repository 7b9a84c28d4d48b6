"""Schémas Pydantic de l'assistant médical."""

from pydantic import BaseModel, Field

from clinicdesk.api.v1.clinics.schemas import QuotaStatusResponse


class AssistantQuestion(BaseModel):
    question: str = Field(..., min_length=1, max_length=2000)


class AssistantAnswer(BaseModel):
    answer: str
    usage: QuotaStatusResponse
