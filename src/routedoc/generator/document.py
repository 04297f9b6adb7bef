"""Document generator — documents every configured service into one Markdown file."""

import logging

from pydantic import BaseModel

from routedoc.config import DocsOptions, ServiceConfig
from routedoc.generator.markdown import render_service
from routedoc.project.graph import (
    SourceFileNotFoundError,
    TypeAliasNotFoundError,
    TypeGraphSession,
    open_session,
)
from routedoc.routes.base import EndpointRecord
from routedoc.routes.walker import RouteTreeWalker
from routedoc.types.base import TypeHandle

log = logging.getLogger(__name__)


class GeneratedDocs(BaseModel):
    """The rendered document and how many endpoints it covers."""

    document: str
    endpoint_count: int = 0


def find_route_type(session: TypeGraphSession, service: ServiceConfig) -> TypeHandle:
    """Load the service's sources and return its route descriptor type."""
    if service.source_files_glob:
        session.add_source_files(service.source_files_glob)
    else:
        session.add_source_file(service.entry_file)

    source = session.source_file(service.entry_file)
    if source is None:
        raise SourceFileNotFoundError(f"{service.name} entry file not found: {service.entry_file}")

    route_type = source.type_alias(service.type_alias_name)
    if route_type is None:
        raise TypeAliasNotFoundError(f"{service.name} type alias not found: {service.type_alias_name}")
    return route_type


def collect_endpoints(session: TypeGraphSession, service: ServiceConfig) -> list[EndpointRecord]:
    return RouteTreeWalker().walk(find_route_type(session, service))


def generate_docs(options: DocsOptions, session: TypeGraphSession | None = None) -> GeneratedDocs:
    """Document all services, write the result to ``options.output_path`` and return it.

    A service whose entry file or route alias cannot be found is logged and
    skipped; the remaining services are still documented.
    """
    if session is None:
        with open_session(options.resolve(options.type_graph)) as owned:
            return generate_docs(options, owned)

    endpoint_count = 0
    parts = [f"# {options.title}\n\n{options.description}\n\n"]
    for service in options.services:
        log.info("Generating docs for %s...", service.name)
        try:
            records = collect_endpoints(session, service)
        except (SourceFileNotFoundError, TypeAliasNotFoundError) as e:
            log.error("%s", e)
            continue
        log.debug("%s: %d endpoints", service.name, len(records))
        endpoint_count += len(records)
        parts.append(render_service(service.title, records, service.sdk))

    document = "".join(parts)
    output_path = options.resolve(options.output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(document, encoding="utf-8")
    log.info("%s generated (%d endpoints)", output_path, endpoint_count)
    return GeneratedDocs(document=document, endpoint_count=endpoint_count)
