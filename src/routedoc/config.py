"""Documentation run configuration.

A YAML config file lists the services to document and where their type
graph lives::

    type_graph: types.yaml
    output_path: DOCS.md
    services:
      - name: luminary
        entry_file: src/app.ts
        sdk:
          import: 'import { treaty } from "@elysiajs/eden";'
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

DEFAULT_SDK_IMPORT = 'import { treaty } from "elysia";'
DEFAULT_CLIENT_NAME = "treaty"
DEFAULT_TITLE = "API Documentation"
DEFAULT_DESCRIPTION = "This document contains API documentation for the configured elysia apps."


class ConfigError(Exception):
    """The config file is missing, unreadable or invalid."""


class SdkConfig(BaseModel):
    """Client SDK text spliced into usage snippets."""

    model_config = ConfigDict(populate_by_name=True)

    import_statement: str = Field(default=DEFAULT_SDK_IMPORT, alias="import")
    client_name: str = DEFAULT_CLIENT_NAME
    client_options: str = ""


class ServiceConfig(BaseModel):
    """A backend service whose route descriptor alias is documented."""

    name: str
    entry_file: str
    source_files_glob: str | None = None
    type_alias_name: str = "App"
    sdk: SdkConfig = Field(default_factory=SdkConfig)

    @property
    def title(self) -> str:
        return self.name[:1].upper() + self.name[1:]


class DocsOptions(BaseModel):
    """Options for one documentation run."""

    services: list[ServiceConfig]
    project_root: Path = Path(".")
    type_graph: Path = Path("types.yaml")
    output_path: Path = Path("DOCS.md")
    title: str = DEFAULT_TITLE
    description: str = DEFAULT_DESCRIPTION

    def resolve(self, path: Path) -> Path:
        """Resolve ``path`` against the project root."""
        return path if path.is_absolute() else self.project_root / path


def load_config(path: Path) -> DocsOptions:
    """Load run options from a YAML file; relative paths resolve against the file."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"cannot parse config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path}: config must be a mapping")

    try:
        options = DocsOptions(**data)
    except ValidationError as e:
        raise ConfigError(f"{path}: {e}") from e

    if not options.project_root.is_absolute():
        options.project_root = path.parent / options.project_root
    return options
