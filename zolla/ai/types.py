from dataclasses import dataclass
from typing import Literal, Protocol, Sequence


Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str


class AIClientError(RuntimeError):
    def __init__(self, message: str, *, code: str = "llm_unavailable"):
        super().__init__(message)
        self.code = code


class AIClient(Protocol):
    async def complete(
        self, messages: Sequence[ChatMessage], *, temperature: float
    ) -> str: ...
