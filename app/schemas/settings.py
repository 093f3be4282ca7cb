# app/schemas/settings.py
from pydantic import BaseModel, Field


class Credential(BaseModel):
    apiKey: str = Field(..., min_length=1, repr=False)


class RepositoryRecord(BaseModel):
    id: str
    namespace: str = Field(..., min_length=1)
