"""
Core data models for the OPA bridge.

These Pydantic models describe version tuples, subprocess outcomes,
parsed Rego modules, and the bridge settings.
"""

from __future__ import annotations

from typing import Any, Optional, Union
from pydantic import AliasChoices, BaseModel, Field, field_validator


# ============================================================================
# Version Models
# ============================================================================

class SemVer(BaseModel):
    """A parsed ``<major>.<minor>.<point>[-<patch>]`` version.

    Numeric fields are floats so that a non-numeric piece can be held
    as ``nan``.
    """
    major: float
    minor: float
    point: float
    patch: str = ""

    def numeric(self) -> tuple[float, float, float]:
        return (self.major, self.minor, self.point)


# ============================================================================
# Process Models
# ============================================================================

class ProcessStatus(BaseModel):
    """Raw outcome of a single subprocess round trip."""
    exit_code: int
    stderr: str = ""
    stdout: str = ""


class Success(BaseModel):
    """Exit status zero and stdout decoded as JSON."""
    value: Any = None


class Failure(BaseModel):
    """Non-zero exit status with the classified error text."""
    message: str


class BinaryNotFound(BaseModel):
    """Neither the search path nor the configured override resolved."""
    path: str


RunResult = Union[Success, Failure, BinaryNotFound]


# ============================================================================
# Rego AST Models (output of `opa parse --format json`)
# ============================================================================

class Term(BaseModel):
    """A typed term; a reference is an ordered list of terms."""
    type: str = Field(default="", validation_alias=AliasChoices("type", "kind"))
    value: Any = None


class Package(BaseModel):
    path: list[Term]

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: list[Term]) -> list[Term]:
        if not v:
            raise ValueError("Package path must not be empty")
        return v


class Import(BaseModel):
    path: Term
    alias: Optional[str] = None

    def ref(self) -> list[Term]:
        """Return the import path as a list of terms."""
        if self.path.type == "ref" and isinstance(self.path.value, list):
            return [Term.model_validate(t) for t in self.path.value]
        return [self.path]


class ParsedModule(BaseModel):
    package: Package
    imports: list[Import] = Field(default_factory=list)
    rules: list[Any] = Field(default_factory=list)

    @field_validator("imports", "rules", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class ModuleSummary(BaseModel):
    """Namespace and dependency labels extracted from a parsed module."""
    namespace: str
    dependencies: list[str] = Field(default_factory=list)


# ============================================================================
# Settings
# ============================================================================

class Settings(BaseModel):
    path: Optional[str] = None  # override for the opa binary location
    timeout: Optional[float] = None  # seconds, None waits forever

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError(f"Timeout must be positive: {v}")
        return v
