# app/schemas/chat.py
from pydantic import BaseModel, Field
from typing import List, Literal, Any, Dict


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class ChatRequest(BaseModel):
    """
    Inbound chat payload.
    - messages: full conversation, LAST entry is the active question
    - selectedRepoId: repository to answer about
    Extra keys (e.g. message ids sent by the UI) are ignored.
    """

    messages: List[ChatMessage] = Field(..., min_length=1)
    selectedRepoId: str = Field(..., min_length=1)

    @property
    def question(self) -> str:
        return self.messages[-1].content

    @property
    def history(self) -> List[ChatMessage]:
        return self.messages[:-1]


class ErrorResponse(BaseModel):
    error: str
    details: Dict[str, Any] = Field(default_factory=dict)
