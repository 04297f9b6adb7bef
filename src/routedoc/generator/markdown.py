"""Markdown rendering of endpoint records."""

import re

from routedoc.config import SdkConfig
from routedoc.routes.base import EndpointRecord
from routedoc.types.normalize import VALID_IDENT

INDENT = "  "

OPENERS = "{["
CLOSERS = "}]"
BREAKS = ";,"


def pretty_print_type(type_text: str) -> str:
    """Reformat a compact type expression with one member per line."""
    out: list[str] = []
    level = 0
    quote = None
    escaped = False

    def newline() -> str:
        return "\n" + INDENT * level

    for char in type_text:
        if quote:
            out.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = None
        elif char in "\"'`":
            quote = char
            out.append(char)
        elif char in OPENERS:
            level += 1
            out.extend([char, newline()])
        elif char in CLOSERS:
            level = max(level - 1, 0)
            # drop the pending line break and any trailing spaces
            while out and (out[-1] == " " or out[-1].startswith("\n")):
                out.pop()
            if out and out[-1] in OPENERS:
                out.append(char)
            else:
                out.extend([newline(), char])
        elif char in BREAKS:
            out.extend([char, newline()])
        elif char.isspace():
            # input line breaks collapse like spaces
            if out and out[-1] != " " and not out[-1].startswith("\n"):
                out.append(" ")
        else:
            out.append(char)

    return "".join(out).strip()


def build_client_path(path: str) -> str:
    """Build a client call chain like ``client.users[params.id]`` from a route path."""
    chain = "client"
    for segment in filter(None, path.split("/")):
        if segment.startswith(":"):
            chain += f"[params.{segment[1:]}]"
        elif VALID_IDENT.fullmatch(segment):
            chain += f".{segment}"
        else:
            chain += f'["{segment}"]'
    return chain


def _example_params(params: str) -> str:
    example = params.replace(";", ",")
    example = re.sub(r",(\s*})", r"\1", example)
    return example.replace(": string", ': "example-value"')


def render_sdk_snippet(record: EndpointRecord, sdk: SdkConfig) -> str:
    """Render a TypeScript usage example for one endpoint."""
    call_args = ", ".join(arg for arg, present in (("body", record.body), ("{ query }", record.query)) if present)

    lines = [
        "```typescript",
        f"{sdk.import_statement}\n",
        f"const client = {sdk.client_name}({sdk.client_options});\n",
    ]
    if record.params:
        lines.append(f"const params = {_example_params(record.params)};\n")
    if record.body:
        lines.append("// Define your request body\nconst body = {}; // Replace with actual body data\n")
    if record.query:
        lines.append("// Define your query parameters\nconst query = {}; // Replace with actual query data\n")
    lines.append(f"const response = await {build_client_path(record.path)}.{record.method.value}({call_args});")
    lines.append("```\n")
    return "\n".join(lines)


def format_type_block(label: str, type_text: str) -> str:
    return f"**{label}:**\n\n```typescript\n{pretty_print_type(type_text)}\n```\n\n"


def render_endpoint(record: EndpointRecord, sdk: SdkConfig) -> str:
    """Render the Markdown section for one endpoint."""
    parts = [
        f"### {record.title}\n\n<details>\n<summary>SDK Usage</summary>\n\n",
        render_sdk_snippet(record, sdk),
    ]
    for label, type_text in (("Body", record.body), ("Params", record.params), ("Query", record.query)):
        if type_text:
            parts.append(format_type_block(label, type_text))
    parts.append(format_type_block("Response", record.response))
    parts.append("</details>\n\n---\n\n")
    return "".join(parts)


def render_service(title: str, records: list[EndpointRecord], sdk: SdkConfig) -> str:
    """Render a service heading followed by its endpoints in walk order."""
    sections = [f"## {title} API\n\n"]
    sections.extend(render_endpoint(record, sdk) for record in records)
    sections.append("\n")
    return "".join(sections)
