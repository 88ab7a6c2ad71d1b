"""CLI entry point for endpoint-codegen."""

import asyncio
from pathlib import Path

import click
import pydantic

from endpoint_codegen.config import CredentialStore, load_config, setup_logging
from endpoint_codegen.errors import CodegenError, ParseError
from endpoint_codegen.generator.prompt import compose_prompt, list_templates
from endpoint_codegen.parser.base import ParsedData, update_field
from endpoint_codegen.parser.extract import extract_metadata_file
from endpoint_codegen.session import Session
from endpoint_codegen.state import Navigate, RecordLoaded


def _load_record(doc_path: Path, metadata: bool) -> ParsedData:
    """Read either a raw endpoint export or a metadata record written by `parse`."""
    if not metadata:
        return extract_metadata_file(doc_path)
    try:
        return ParsedData.from_json(doc_path.read_text(encoding="utf-8"))
    except pydantic.ValidationError as e:
        raise ParseError(f"无效的元数据文件：{doc_path}") from e


def _apply_overrides(data: ParsedData, **overrides: str | None) -> ParsedData:
    for field, value in overrides.items():
        if value is not None:
            data = update_field(data, field, value)
    return data


def _write_or_echo(text: str, output: Path | None) -> None:
    if output is None:
        click.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    click.echo(f"Saved to {output}", err=True)


class _Group(click.Group):
    """Click group that reports CodegenError as a normal CLI error."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except CodegenError as e:
            raise click.ClickException(e.message) from e


@click.group(cls=_Group)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option("--config", "config_path", default=None, type=click.Path(path_type=Path), help="Config file path.")
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_path: Path | None):
    """Endpoint Codegen — extract API endpoint metadata and generate client code."""
    config = load_config(config_path)
    setup_logging("DEBUG" if verbose else config["log_level"])
    ctx.obj = {"config": config, "store": CredentialStore(config_path)}


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Write the metadata JSON to this file.")
def parse(doc_path: Path, output: Path | None):
    """Extract endpoint metadata from an API export."""
    data = extract_metadata_file(doc_path)
    _write_or_echo(data.to_json(), output)


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
@click.option("--metadata", is_flag=True, help="DOC_PATH is a metadata file written by `parse`.")
@click.option("--template", default=None, help="Bundled template name or template file path.")
@click.option("--name", default=None, help="Override the endpoint name.")
@click.option("--method", default=None, help="Override the HTTP method.")
@click.option("--url", default=None, help="Override the endpoint path.")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Write the prompt to this file.")
@click.pass_obj
def prompt(
    obj: dict,
    doc_path: Path,
    metadata: bool,
    template: str | None,
    name: str | None,
    method: str | None,
    url: str | None,
    output: Path | None,
):
    """Print the code-generation prompt for an endpoint."""
    data = _apply_overrides(_load_record(doc_path, metadata), name=name, method=method, url=url)
    _write_or_echo(compose_prompt(data, template=template or obj["config"]["template"]), output)


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, path_type=Path))
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Write the generated code to this file.")
@click.option("--metadata", is_flag=True, help="DOC_PATH is a metadata file written by `parse`.")
@click.option("--model", default=None, help="LLM model to use.")
@click.option("--template", default=None, help="Bundled template name or template file path.")
@click.option("--name", default=None, help="Override the endpoint name.")
@click.option("--method", default=None, help="Override the HTTP method.")
@click.option("--url", default=None, help="Override the endpoint path.")
@click.pass_obj
def gen(
    obj: dict,
    doc_path: Path,
    output: Path | None,
    metadata: bool,
    model: str | None,
    template: str | None,
    name: str | None,
    method: str | None,
    url: str | None,
):
    """Generate client code for an endpoint via the LLM."""
    config = obj["config"]
    data = _apply_overrides(_load_record(doc_path, metadata), name=name, method=method, url=url)

    session = Session(
        obj["store"],
        model=model or config["model"],
        template=template or config["template"],
    )
    session.dispatch(Navigate(page="json-parser"))
    session.dispatch(RecordLoaded(parsed=data))

    click.echo(f"Generating code for {data.method} {data.url}...", err=True)
    try:
        state = asyncio.run(session.generate())
    finally:
        session.close()

    if state.error:
        raise click.ClickException(state.error)
    _write_or_echo(state.generated_code, output)


@main.command()
def templates():
    """List bundled prompt templates."""
    for name in list_templates():
        click.echo(name)


@main.group()
def key():
    """Manage the stored LLM API key."""


@key.command("set")
@click.argument("api_key", required=False)
@click.pass_obj
def key_set(obj: dict, api_key: str | None):
    """Save the API key (prompted without echo when omitted)."""
    if api_key is None:
        api_key = click.prompt("API key", hide_input=True, default="", show_default=False)
    obj["store"].set(api_key)
    click.echo("API key saved.")


@key.command("clear")
@click.pass_obj
def key_clear(obj: dict):
    """Remove the stored API key."""
    obj["store"].clear()
    click.echo("API key removed.")


@key.command("status")
@click.pass_obj
def key_status(obj: dict):
    """Show whether an API key is configured."""
    click.echo("configured" if obj["store"].is_configured else "not configured")
