"""
Domain models for query templates and generated patch files.

QueryDefinition / ParameterDefinition are built once by the metadata parser and
are read-only afterwards. GeneratedArtifact is produced per request.
"""

import logging
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

_log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ParamTypeEnum(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    INTEGER = "integer"
    DATE = "date"
    FILE = "file"
    # Any other declared type: value is emitted unquoted
    RAW = "raw"

    @classmethod
    def parse(cls, value: str | None) -> "ParamTypeEnum":
        """Map a declared type string to a member. Empty -> TEXT, unknown -> RAW."""
        s = (value or "").strip().lower()
        if not s:
            return cls.TEXT
        try:
            return cls(s)
        except ValueError:
            _log.debug("Unknown parameter type %r, value will be emitted unquoted", value)
            return cls.RAW


class ExecutionModeEnum(str, Enum):
    UNITAIRE = "unitaire"
    MASSE = "masse"


# ---------------------------------------------------------------------------
# Query definitions
# ---------------------------------------------------------------------------


class ParameterDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: ParamTypeEnum = ParamTypeEnum.TEXT
    label: str = ""
    required: bool = False
    is_file: bool = False


class QueryDefinition(BaseModel):
    """A parsed template: metadata, ordered parameters and the SQL body."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str | None = None
    description: str | None = None
    tags: tuple[str, ...] | None = None
    source_ref: str
    parameters: tuple[ParameterDefinition, ...] = ()
    # Template body with the leading metadata block removed
    sql: str = ""

    @property
    def display_name(self) -> str:
        return self.name or self.id

    @property
    def file_parameters(self) -> list[ParameterDefinition]:
        return [p for p in self.parameters if p.is_file]

    @property
    def scalar_parameters(self) -> list[ParameterDefinition]:
        """Non-file parameters in declaration order (CSV column order in mass mode)."""
        return [p for p in self.parameters if not p.is_file]

    @property
    def has_file_parameter(self) -> bool:
        return any(p.is_file for p in self.parameters)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class GeneratedArtifact(BaseModel):
    model_config = ConfigDict(frozen=True)

    file_name: str
    header: str
    body: str
    created_at: datetime

    @property
    def content(self) -> str:
        return f"{self.header}\n{self.body}"
