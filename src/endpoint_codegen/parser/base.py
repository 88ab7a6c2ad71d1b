"""Data models for extracted endpoint metadata.

The extractor converts an API export into these models; edits produce new
records through the copy-on-write helpers at the bottom of this module.
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, PrivateAttr, model_validator

from endpoint_codegen.errors import EditError

EDITABLE_FIELDS = ("name", "method", "url")
EDITABLE_PARAM_FIELDS = ("key", "field_type", "description", "value", "is_checked", "not_null")


def _without_nulls(values):
    # JSON null falls back to the field default
    if isinstance(values, dict):
        return {k: v for k, v in values.items() if v is not None}
    return values


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow", coerce_numbers_to_str=True)


class _NullTolerant(_Record):
    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, values):
        return _without_nulls(values)


class Param(_Record):
    """One field of a request or response body."""

    param_id: str = ""
    description: str = ""
    field_type: str = ""  # string / number / boolean / array / object / null
    key: str = ""  # body.data.accountId
    is_checked: int = 0
    not_null: int = 0
    value: Any = ""  # sample value, any JSON type

    _source: dict = PrivateAttr(default_factory=dict)

    @model_validator(mode="wrap")
    @classmethod
    def _keep_source(cls, values, handler):
        param = handler(_without_nulls(values))
        if isinstance(values, dict):
            param._source = dict(values)
        return param

    @property
    def depth(self) -> int:
        return len(self.key.split(".")) - 1

    def as_source(self) -> dict:
        """Return the parameter as it was read, with edits applied, in input key order."""
        return dict(self._source) if self._source else self.model_dump(exclude_unset=True)


class Expect(_NullTolerant):
    code: str = ""
    name: str = ""


class ResponseExample(_NullTolerant):
    """One documented response variant."""

    example_id: str = ""
    raw: str = ""
    raw_parameter: list[Param] = []
    expect: Expect = Expect()


class ParsedData(_NullTolerant):
    """Normalized metadata of a single endpoint."""

    name: str = ""
    method: str = ""  # case preserved as given
    url: str = ""
    request_params: list[Param] = []
    request_raw: str = ""
    responses: list[ResponseExample] = []

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)

    @classmethod
    def from_json(cls, text: str) -> "ParsedData":
        return cls.model_validate_json(text)


def dump_params(params: list[Param]) -> str:
    """Serialize parameters as indented JSON in the shape they were read."""
    return json.dumps(
        [p.as_source() for p in params],
        indent=2,
        ensure_ascii=False,
    )


def update_field(data: ParsedData, field: str, value: str) -> ParsedData:
    """Return a copy of ``data`` with one top-level field replaced."""
    if field not in EDITABLE_FIELDS:
        raise EditError(f"字段 {field!r} 不可编辑。")
    return data.model_copy(deep=True, update={field: value})


def update_request_param(data: ParsedData, index: int, field: str, value: str | int) -> ParsedData:
    """Return a copy of ``data`` with one request parameter field replaced."""
    params = _replace_param(data.request_params, index, field, value)
    return data.model_copy(deep=True, update={"request_params": params})


def update_response_param(
    data: ParsedData, response_index: int, param_index: int, field: str, value: str | int
) -> ParsedData:
    """Return a copy of ``data`` with one response parameter field replaced."""
    responses = [r.model_copy(deep=True) for r in data.responses]
    if not 0 <= response_index < len(responses):
        raise EditError(f"响应示例索引 {response_index} 超出范围。")
    target = responses[response_index]
    params = _replace_param(target.raw_parameter, param_index, field, value)
    responses[response_index] = target.model_copy(update={"raw_parameter": params})
    return data.model_copy(deep=True, update={"responses": responses})


def _replace_param(params: list[Param], index: int, field: str, value: str | int) -> list[Param]:
    if field not in EDITABLE_PARAM_FIELDS:
        raise EditError(f"参数字段 {field!r} 不可编辑。")
    if not 0 <= index < len(params):
        raise EditError(f"参数索引 {index} 超出范围。")
    if field in ("is_checked", "not_null"):
        try:
            value = int(value)
        except ValueError as e:
            raise EditError(f"参数字段 {field!r} 需要整数。") from e
    else:
        value = str(value)
    copied = [p.model_copy(deep=True) for p in params]
    target = copied[index]
    copied[index] = target.model_copy(update={field: value})
    copied[index]._source = {**target.as_source(), field: value}
    return copied
