"""Prompt composer: turns endpoint metadata into a code-generation prompt."""

from datetime import date
from pathlib import Path
from string import Template

from endpoint_codegen.errors import TemplateNotFoundError
from endpoint_codegen.parser.base import Param, ParsedData, ResponseExample, dump_params

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"

DEFAULT_TEMPLATE = "swift_moya"
NOT_AVAILABLE = "Not available"


def first_success_response(data: ParsedData) -> ResponseExample | None:
    """Return the first response example with a 2xx status code."""
    return next((r for r in data.responses if r.expect.code.startswith("2")), None)


def response_body_params(data: ParsedData) -> list[Param]:
    """Return the body.* parameters of the first successful response."""
    success = first_success_response(data)
    if success is None:
        return []
    return [p for p in success.raw_parameter if p.key.startswith("body.")]


def list_templates() -> list[str]:
    return sorted(p.stem for p in PROMPTS_DIR.glob("*.md"))


def load_template(template: str | Path = DEFAULT_TEMPLATE) -> str:
    """Load a prompt template by bundled name or filesystem path."""
    path = Path(template)
    if not path.is_file():
        path = PROMPTS_DIR / f"{template}.md"
    if not path.is_file():
        raise TemplateNotFoundError(f"找不到提示词模板：{template}")
    return path.read_text(encoding="utf-8")


def compose_prompt(
    data: ParsedData,
    template: str | Path = DEFAULT_TEMPLATE,
    today: date | None = None,
) -> str:
    """Fill the template with the metadata of ``data``.

    The result depends only on ``data``, the template and the date.
    Unknown ``$placeholders`` in custom templates are left untouched.
    """
    success = first_success_response(data)
    today = today or date.today()

    return Template(load_template(template)).safe_substitute(
        name=data.name,
        method=data.method,
        method_lower=data.method.lower(),
        url=data.url,
        date=today.strftime("%Y-%m-%d"),
        request_params=dump_params(data.request_params),
        request_raw=data.request_raw or NOT_AVAILABLE,
        response_params=dump_params(response_body_params(data)),
        response_raw=(success.raw if success else "") or NOT_AVAILABLE,
    )
