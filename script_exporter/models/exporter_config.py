"""Exporter configuration file (YAML).

Example::

    tls:
      active: false
      crt: server.crt
      key: server.key
    basicAuth:
      active: false
      username: admin
      password: admin
    bearerAuth:
      active: false
      signingKey: my_secret_key
    scripts:
      - name: test
        script: ./examples/test.sh

Every section is optional.  The model is frozen once loaded; request
handling only ever reads it.
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class TLSConfig(_Section):
    active: bool = False
    crt: str = ""
    key: str = ""

    @model_validator(mode="after")
    def _require_files_when_active(self) -> TLSConfig:
        if self.active and not (self.crt and self.key):
            raise ValueError("tls.crt and tls.key are required when tls is active")
        return self


class BasicAuthConfig(_Section):
    active: bool = False
    username: str = ""
    password: str = ""

    @model_validator(mode="after")
    def _require_username_when_active(self) -> BasicAuthConfig:
        if self.active and not self.username:
            raise ValueError("basicAuth.username is required when basicAuth is active")
        return self


class BearerAuthConfig(_Section):
    active: bool = False
    signing_key: str = Field(default="", alias="signingKey")

    @model_validator(mode="after")
    def _require_key_when_active(self) -> BearerAuthConfig:
        if self.active and not self.signing_key:
            raise ValueError("bearerAuth.signingKey is required when bearerAuth is active")
        return self


class ScriptConfig(_Section):
    name: str = Field(min_length=1)
    script: str = Field(min_length=1)


class ExporterConfig(_Section):
    tls: TLSConfig = Field(default_factory=TLSConfig)
    basic_auth: BasicAuthConfig = Field(default_factory=BasicAuthConfig, alias="basicAuth")
    bearer_auth: BearerAuthConfig = Field(default_factory=BearerAuthConfig, alias="bearerAuth")
    scripts: tuple[ScriptConfig, ...] = ()

    @model_validator(mode="after")
    def _unique_script_names(self) -> ExporterConfig:
        seen: set[str] = set()
        for entry in self.scripts:
            if entry.name in seen:
                raise ValueError(f"duplicate script name {entry.name!r}")
            seen.add(entry.name)
        return self


def load_exporter_config(path: str | Path) -> ExporterConfig:
    """Read and validate the YAML configuration file.

    Raises ValueError with a readable message on any failure.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ValueError(f"cannot read config file {str(path)!r}: {e.strerror}") from e

    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"config file {str(path)!r} is not valid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"config file {str(path)!r} must contain a mapping")

    try:
        return ExporterConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"invalid config file {str(path)!r}: {e}") from e
