"""Immutable interface state and the reducer that transitions it.

Front ends keep one AppState snapshot and replace it with
``reduce(state, event)`` for every user or system event.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict

from endpoint_codegen.errors import CodegenError
from endpoint_codegen.parser.base import (
    ParsedData,
    update_field,
    update_request_param,
    update_response_param,
)
from endpoint_codegen.parser.extract import extract_metadata

Page = Literal["home", "json-parser"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class AppState(_Frozen):
    page: Page = "home"
    json_input: str = ""
    parsed: ParsedData | None = None
    error: str = ""
    is_generating: bool = False
    generated_code: str = ""
    key_available: bool = False


class Navigate(_Frozen):
    page: Page


class InputChanged(_Frozen):
    text: str


class RecordLoaded(_Frozen):
    parsed: ParsedData


class ParseRequested(_Frozen):
    pass


class FieldEdited(_Frozen):
    field: str
    value: str


class RequestParamEdited(_Frozen):
    index: int
    field: str
    value: str | int


class ResponseParamEdited(_Frozen):
    response_index: int
    param_index: int
    field: str
    value: str | int


class GenerationStarted(_Frozen):
    pass


class GenerationSucceeded(_Frozen):
    code: str


class GenerationFailed(_Frozen):
    message: str
    auth: bool = False


class CredentialChanged(_Frozen):
    available: bool


Event = (
    Navigate | InputChanged | RecordLoaded | ParseRequested | FieldEdited | RequestParamEdited
    | ResponseParamEdited | GenerationStarted | GenerationSucceeded
    | GenerationFailed | CredentialChanged
)


def reduce(state: AppState, event: Event) -> AppState:
    """Return the state that follows ``state`` after ``event``."""
    if isinstance(event, Navigate):
        return state.model_copy(update={"page": event.page})

    if isinstance(event, InputChanged):
        return state.model_copy(update={"json_input": event.text})

    if isinstance(event, ParseRequested):
        try:
            parsed = extract_metadata(state.json_input)
        except CodegenError as e:
            return state.model_copy(update={"parsed": None, "error": e.message, "generated_code": ""})
        return state.model_copy(update={"parsed": parsed, "error": "", "generated_code": ""})

    if isinstance(event, RecordLoaded):
        return state.model_copy(update={"parsed": event.parsed, "error": "", "generated_code": ""})

    if isinstance(event, (FieldEdited, RequestParamEdited, ResponseParamEdited)):
        return _apply_edit(state, event)

    if isinstance(event, GenerationStarted):
        return state.model_copy(update={"is_generating": True, "generated_code": "", "error": ""})

    if isinstance(event, GenerationSucceeded):
        return state.model_copy(update={"is_generating": False, "generated_code": event.code})

    if isinstance(event, GenerationFailed):
        update = {"is_generating": False, "error": event.message}
        if event.auth:
            update["key_available"] = False
        return state.model_copy(update=update)

    if isinstance(event, CredentialChanged):
        return state.model_copy(update={"key_available": event.available})

    raise TypeError(f"Unknown event: {event!r}")


def _apply_edit(state: AppState, event: Event) -> AppState:
    if state.parsed is None:
        return state
    try:
        if isinstance(event, FieldEdited):
            parsed = update_field(state.parsed, event.field, event.value)
        elif isinstance(event, RequestParamEdited):
            parsed = update_request_param(state.parsed, event.index, event.field, event.value)
        else:
            parsed = update_response_param(
                state.parsed, event.response_index, event.param_index, event.field, event.value
            )
    except CodegenError as e:
        return state.model_copy(update={"error": e.message})
    return state.model_copy(update={"parsed": parsed})
