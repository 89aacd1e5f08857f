"""
app/schemas/csv_worker.py

Message shapes exchanged with the CSV tokenizer worker process.

Every message crosses the process boundary as a plain dict produced by
``model_dump()`` and is re-validated on receipt with
:func:`parse_worker_message`.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

PARSE_ERROR_PREFIX = "Error parsing CSV file"


class ParseRequestMessage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: str


class ProgressMessage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["progress"] = "progress"
    progress: float = Field(..., ge=0.0, le=1.0)


class ParseSuccessMessage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    success: Literal[True] = True
    data: list[list[str]] = Field(default_factory=list)


class ParseFailureMessage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    success: Literal[False] = False
    error: str = Field(..., min_length=1)


WorkerMessage = ProgressMessage | ParseSuccessMessage | ParseFailureMessage
TerminalMessage = ParseSuccessMessage | ParseFailureMessage


def format_parse_error(cause: BaseException | str | None) -> str:
    """
    Build the user-facing failure text: fixed prefix plus the underlying cause.
    """

    detail = str(cause).strip() if cause is not None else ""
    if not detail:
        detail = "Unknown error parsing CSV file"
    return f"{PARSE_ERROR_PREFIX}: {detail}"


def parse_worker_message(payload: dict[str, Any]) -> WorkerMessage:
    """
    Validate one raw message received from the worker.

    Raises pydantic ``ValidationError`` for shapes outside the protocol.
    """

    if payload.get("type") == "progress":
        return ProgressMessage.model_validate(payload)
    if payload.get("success") is True:
        return ParseSuccessMessage.model_validate(payload)
    return ParseFailureMessage.model_validate(payload)
