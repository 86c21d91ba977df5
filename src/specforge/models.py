"""Canonical Pydantic models shared across all specforge modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into four groups:

**Configuration models** -- serialised as JSON in the user's config directory
or in a per-target marker file:
    :class:`OutputConfig`, :class:`GlobalConfig`, :class:`MultiPartConfiguration`,
    and :class:`MarkerConfig`.

**Document models** -- parsed specifications with provenance:
    :class:`HTTPMethod`, :class:`OpenAPIDocument`, :class:`OperationRef`, and
    :class:`SpecificationFile`.

**Engine results** -- values produced by the merge, split, and validation
engines:
    :class:`DiagnosticSeverity`, :class:`DiagnosticMessage`,
    :class:`MergeResult`, :class:`SplitFileContent`, :class:`SplitResult`,
    :class:`SpecificationAnalysis` and its per-tag / per-segment parts.

**Resolved extension configuration** -- consumed by downstream generators:
    :class:`CacheConfiguration`, :class:`RateLimitConfiguration`,
    :class:`RetryConfiguration`, :class:`SecurityConfiguration`, and
    :class:`ResolvedExtensions`.

All models use Pydantic v2. Result models are frozen: they are produced once
and read by the caller, never mutated.
"""

from __future__ import annotations

import enum
import hashlib
from pathlib import Path
from typing import Any, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _CaseInsensitiveEnum(str, enum.Enum):
    """String enum that also accepts its values in any letter case."""

    @classmethod
    def _missing_(cls, value: object) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower().replace("-", "").replace("_", "")
            for member in cls:
                if member.value.lower().replace("-", "").replace("_", "") == lowered:
                    return member
        return None


# --- Enumerations ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised as operations inside an OpenAPI path item."""

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


class DiagnosticSeverity(str, enum.Enum):
    """Severity of a :class:`DiagnosticMessage`.

    Only ``ERROR`` blocks downstream generation; ``WARNING`` and ``INFO``
    are advisory.
    """

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class MergeStrategy(_CaseInsensitiveEnum):
    """Conflict policy applied to one document section during a merge."""

    ERROR_ON_DUPLICATE = "ErrorOnDuplicate"
    MERGE_IF_IDENTICAL = "MergeIfIdentical"
    APPEND_UNIQUE = "AppendUnique"
    FIRST_WINS = "FirstWins"
    LAST_WINS = "LastWins"


class DiscoveryMode(_CaseInsensitiveEnum):
    """How part files are located for a base specification."""

    AUTO = "auto"
    EXPLICIT = "explicit"


class SplitStrategy(_CaseInsensitiveEnum):
    """Approach used to decompose one document into part files."""

    BY_TAG = "ByTag"
    BY_PATH_SEGMENT = "ByPathSegment"
    BY_DOMAIN = "ByDomain"


class ValidationStrictness(_CaseInsensitiveEnum):
    """Depth of validation applied by :func:`~specforge.validation.validate`.

    * ``NONE`` -- skip every check.
    * ``STANDARD`` -- structural soundness only (version, unresolved
      references, malformed array items).
    * ``STRICT`` -- standard checks plus the full naming, security, operation
      and schema convention battery.
    """

    NONE = "none"
    STANDARD = "standard"
    STRICT = "strict"


class CacheType(_CaseInsensitiveEnum):
    OUTPUT = "output"
    HYBRID = "hybrid"


class CacheMode(_CaseInsensitiveEnum):
    HYBRID = "hybrid"
    IN_MEMORY = "in-memory"
    DISTRIBUTED = "distributed"


class RateLimitAlgorithm(_CaseInsensitiveEnum):
    FIXED = "fixed"
    SLIDING = "sliding"
    TOKEN_BUCKET = "token-bucket"
    CONCURRENCY = "concurrency"


class RetryBackoffType(_CaseInsensitiveEnum):
    EXPONENTIAL = "exponential"
    LINEAR = "linear"
    CONSTANT = "constant"


class SecuritySource(str, enum.Enum):
    """Where a resolved :class:`SecurityConfiguration` came from."""

    NONE = "none"
    EXTENSIONS = "extensions"
    OPENAPI = "openapi"
    BOTH = "both"


# --- Configuration ---


class OutputConfig(BaseModel):
    """Output preferences stored in the global config."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide defaults, stored as ``config.json`` in the config directory.

    Loaded and saved by :func:`~specforge.config.load_global_config` and
    :func:`~specforge.config.save_global_config`.
    """

    default_strictness: ValidationStrictness = ValidationStrictness.STANDARD
    output: OutputConfig = Field(default_factory=OutputConfig)


class MultiPartConfiguration(BaseModel):
    """Declares how a base specification and its part files are merged.

    Usually supplied by the caller, but an ``x-multipart`` object in the base
    document overrides it. Keys are accepted in camelCase (as written in
    YAML) or snake_case.

    Example::

        x-multipart:
          discovery: explicit
          parts: [Petstore_Pets.yaml, Petstore_Orders.yaml]
          parametersMergeStrategy: FirstWins
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    enabled: bool = True
    discovery: DiscoveryMode = DiscoveryMode.AUTO
    parts: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(
        default_factory=list,
        description="Gitignore-style patterns removed from auto discovery",
    )
    paths_merge_strategy: MergeStrategy = Field(
        default=MergeStrategy.ERROR_ON_DUPLICATE, alias="pathsMergeStrategy"
    )
    schemas_merge_strategy: MergeStrategy = Field(
        default=MergeStrategy.ERROR_ON_DUPLICATE, alias="schemasMergeStrategy"
    )
    parameters_merge_strategy: MergeStrategy = Field(
        default=MergeStrategy.MERGE_IF_IDENTICAL, alias="parametersMergeStrategy"
    )
    tags_merge_strategy: MergeStrategy = Field(
        default=MergeStrategy.APPEND_UNIQUE, alias="tagsMergeStrategy"
    )

    @classmethod
    def default(cls) -> MultiPartConfiguration:
        """Return the default configuration (auto discovery, section defaults)."""
        return cls()

    @classmethod
    def disabled(cls) -> MultiPartConfiguration:
        """Return a configuration that treats every base file as single-file."""
        return cls(enabled=False)


class MarkerConfig(BaseModel):
    """Per-target configuration recorded in a ``.specforge.json`` marker file.

    The marker sits next to the base specification so that repeated runs
    are reproducible without re-specifying CLI flags. Unknown keys written
    by other tools are preserved in ``model_extra``.
    """

    model_config = ConfigDict(extra="allow")

    strictness: ValidationStrictness = ValidationStrictness.STANDARD
    namespace: Optional[str] = Field(
        default=None, description="Namespace / package hint for generators"
    )
    split_strategy: Optional[SplitStrategy] = None
    include_deprecated: bool = True
    convert_dates: bool = Field(
        default=False, description="Project date/date-time strings to a native date type"
    )
    nullable_as_union: bool = Field(
        default=True, description="Decorate nullable projections with '| null'"
    )
    multipart: MultiPartConfiguration = Field(default_factory=MultiPartConfiguration)


# --- Diagnostics ---


class DiagnosticMessage(BaseModel):
    """One reportable finding from merge, split, or validation.

    ``rule_id`` and ``severity`` are the only machine-readable parts; the
    message text is for humans. Instances are immutable -- the ``with_*``
    builders return modified copies.
    """

    model_config = ConfigDict(frozen=True)

    rule_id: str
    message: str
    severity: DiagnosticSeverity
    file_path: Optional[str] = None
    line_number: Optional[int] = None
    column_number: Optional[int] = None
    context: Optional[str] = None
    suggestions: list[str] = Field(default_factory=list)
    documentation_url: Optional[str] = None

    @classmethod
    def error(
        cls, rule_id: str, message: str, file_path: Optional[str] = None
    ) -> DiagnosticMessage:
        return cls(
            rule_id=rule_id,
            message=message,
            severity=DiagnosticSeverity.ERROR,
            file_path=file_path,
        )

    @classmethod
    def warning(
        cls, rule_id: str, message: str, file_path: Optional[str] = None
    ) -> DiagnosticMessage:
        return cls(
            rule_id=rule_id,
            message=message,
            severity=DiagnosticSeverity.WARNING,
            file_path=file_path,
        )

    @classmethod
    def info(
        cls, rule_id: str, message: str, file_path: Optional[str] = None
    ) -> DiagnosticMessage:
        return cls(
            rule_id=rule_id,
            message=message,
            severity=DiagnosticSeverity.INFO,
            file_path=file_path,
        )

    def with_context(self, context: str) -> DiagnosticMessage:
        return self.model_copy(update={"context": context})

    def with_location(
        self,
        file_path: Optional[str],
        line_number: Optional[int] = None,
        column_number: Optional[int] = None,
    ) -> DiagnosticMessage:
        return self.model_copy(
            update={
                "file_path": file_path,
                "line_number": line_number,
                "column_number": column_number,
            }
        )

    def with_suggestions(self, *suggestions: str) -> DiagnosticMessage:
        return self.model_copy(update={"suggestions": list(suggestions)})

    def with_documentation(self, url: str) -> DiagnosticMessage:
        return self.model_copy(update={"documentation_url": url})

    @property
    def is_error(self) -> bool:
        return self.severity == DiagnosticSeverity.ERROR

    @property
    def has_rich_context(self) -> bool:
        """Whether the message carries context, suggestions, or a docs link."""
        return bool(self.context or self.suggestions or self.documentation_url)

    @property
    def location(self) -> str:
        """``file:line:column`` with missing parts omitted (empty when unknown)."""
        if not self.file_path:
            return ""
        loc = self.file_path
        if self.line_number is not None:
            loc += f":{self.line_number}"
            if self.column_number is not None:
                loc += f":{self.column_number}"
        return loc


# --- Document model ---


class OperationRef(BaseModel):
    """One ``(path, method)`` operation together with its enclosing path item."""

    path: str
    method: HTTPMethod
    operation: dict[str, Any]
    path_item: dict[str, Any]

    @property
    def operation_id(self) -> Optional[str]:
        value = self.operation.get("operationId")
        return value if isinstance(value, str) and value else None

    @property
    def tags(self) -> list[str]:
        tags = self.operation.get("tags")
        if not isinstance(tags, list):
            return []
        return [t for t in tags if isinstance(t, str)]

    @property
    def label(self) -> str:
        """Human label such as ``GET /pets/{petId}``."""
        return f"{self.method.value.upper()} {self.path}"


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


class OpenAPIDocument(BaseModel):
    """In-memory view over one parsed OpenAPI description.

    The document keeps the parsed mapping in :attr:`raw` (section order is
    preserved, so serialising it again yields a faithful round trip) and
    exposes typed, never-``None`` accessors for the sections the engines
    work with. Accessors tolerate malformed sections by returning empty
    containers, leaving structural complaints to the validation engine.

    Example::

        doc = OpenAPIDocument(raw=yaml.safe_load(text))
        for op in doc.iter_operations():
            print(op.label, op.operation_id)
    """

    model_config = ConfigDict(frozen=True)

    raw: dict[str, Any] = Field(default_factory=dict)

    @property
    def openapi_version(self) -> Optional[str]:
        value = self.raw.get("openapi")
        return str(value) if value is not None else None

    @property
    def swagger_version(self) -> Optional[str]:
        value = self.raw.get("swagger")
        return str(value) if value is not None else None

    @property
    def info(self) -> dict[str, Any]:
        return _as_dict(self.raw.get("info"))

    @property
    def paths(self) -> dict[str, Any]:
        return _as_dict(self.raw.get("paths"))

    @property
    def components(self) -> dict[str, Any]:
        return _as_dict(self.raw.get("components"))

    @property
    def schemas(self) -> dict[str, Any]:
        return _as_dict(self.components.get("schemas"))

    @property
    def parameters(self) -> dict[str, Any]:
        return _as_dict(self.components.get("parameters"))

    @property
    def security_schemes(self) -> dict[str, Any]:
        return _as_dict(self.components.get("securitySchemes"))

    @property
    def webhooks(self) -> dict[str, Any]:
        return _as_dict(self.raw.get("webhooks"))

    @property
    def tags(self) -> list[dict[str, Any]]:
        tags = self.raw.get("tags")
        if not isinstance(tags, list):
            return []
        return [t for t in tags if isinstance(t, dict)]

    @property
    def tag_names(self) -> list[str]:
        return [t["name"] for t in self.tags if isinstance(t.get("name"), str)]

    @property
    def servers(self) -> list[dict[str, Any]]:
        servers = self.raw.get("servers")
        if not isinstance(servers, list):
            return []
        return [s for s in servers if isinstance(s, dict)]

    @property
    def security(self) -> Optional[list[Any]]:
        """Document-level security requirements, or ``None`` when not declared."""
        value = self.raw.get("security")
        return value if isinstance(value, list) else None

    @property
    def extensions(self) -> dict[str, Any]:
        """Root-level ``x-*`` extension fields."""
        return {k: v for k, v in self.raw.items() if isinstance(k, str) and k.startswith("x-")}

    def iter_operations(self) -> Iterator[OperationRef]:
        """Yield every operation in path order, then method declaration order."""
        for path, path_item in self.paths.items():
            if not isinstance(path_item, dict):
                continue
            for key, operation in path_item.items():
                if key not in _HTTP_METHODS or not isinstance(operation, dict):
                    continue
                yield OperationRef(
                    path=path,
                    method=HTTPMethod(key),
                    operation=operation,
                    path_item=path_item,
                )

    def iter_webhook_operations(self) -> Iterator[OperationRef]:
        """Yield every webhook operation (``path`` holds the webhook name)."""
        for name, item in self.webhooks.items():
            if not isinstance(item, dict):
                continue
            for key, operation in item.items():
                if key in _HTTP_METHODS and isinstance(operation, dict):
                    yield OperationRef(
                        path=str(name), method=HTTPMethod(key), operation=operation, path_item=item
                    )

    @property
    def operation_count(self) -> int:
        return sum(1 for _ in self.iter_operations())


_HTTP_METHODS = frozenset(m.value for m in HTTPMethod)


class SpecificationFile(BaseModel):
    """A file-backed document with provenance.

    Built by :func:`~specforge.parser.specfile.specification_from_content`
    or :func:`~specforge.parser.specfile.read_specification`. A parse failure
    leaves :attr:`document` as ``None`` and records the reason in
    :attr:`diagnostics`; callers must check before merging.
    """

    model_config = ConfigDict(frozen=True)

    file_path: str
    content: str = ""
    document: Optional[OpenAPIDocument] = None
    is_base_file: bool = True
    is_part_file: bool = False
    part_name: Optional[str] = None
    diagnostics: list[DiagnosticMessage] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_role(self) -> SpecificationFile:
        if self.is_base_file and self.is_part_file:
            raise ValueError("A specification file cannot be both base and part")
        return self

    @property
    def file_name(self) -> str:
        return Path(self.file_path).name

    @property
    def stem(self) -> str:
        return Path(self.file_path).stem

    @property
    def is_parsed(self) -> bool:
        return self.document is not None

    @property
    def digest(self) -> str:
        """SHA-256 hex digest of the raw content."""
        return hashlib.sha256(self.content.encode("utf-8")).hexdigest()

    @property
    def path_count(self) -> int:
        return len(self.document.paths) if self.document else 0

    @property
    def schema_count(self) -> int:
        return len(self.document.schemas) if self.document else 0

    @property
    def parameter_count(self) -> int:
        return len(self.document.parameters) if self.document else 0

    @property
    def operation_count(self) -> int:
        return self.document.operation_count if self.document else 0

    def get_tags(self) -> list[str]:
        """Distinct tag names used by operations or declared globally, in first-seen order."""
        if self.document is None:
            return []
        seen: dict[str, None] = {}
        for name in self.document.tag_names:
            seen.setdefault(name, None)
        for op in self.document.iter_operations():
            for tag in op.tags:
                seen.setdefault(tag, None)
        return list(seen)


# --- Merge results ---


class MergeResult(BaseModel):
    """Outcome of merging a base file with zero or more part files."""

    model_config = ConfigDict(frozen=True)

    document: Optional[OpenAPIDocument] = None
    base_file: Optional[SpecificationFile] = None
    part_files: list[SpecificationFile] = Field(default_factory=list)
    diagnostics: list[DiagnosticMessage] = Field(default_factory=list)

    @classmethod
    def success(
        cls,
        document: OpenAPIDocument,
        base_file: SpecificationFile,
        part_files: list[SpecificationFile],
        diagnostics: list[DiagnosticMessage],
    ) -> MergeResult:
        return cls(
            document=document,
            base_file=base_file,
            part_files=part_files,
            diagnostics=diagnostics,
        )

    @classmethod
    def single_file(
        cls,
        base_file: SpecificationFile,
        diagnostics: Optional[list[DiagnosticMessage]] = None,
    ) -> MergeResult:
        return cls(
            document=base_file.document,
            base_file=base_file,
            diagnostics=diagnostics or [],
        )

    @classmethod
    def failed(
        cls,
        diagnostics: list[DiagnosticMessage],
        base_file: Optional[SpecificationFile] = None,
    ) -> MergeResult:
        return cls(base_file=base_file, diagnostics=diagnostics)

    @property
    def all_files(self) -> list[SpecificationFile]:
        files = [self.base_file] if self.base_file is not None else []
        return files + list(self.part_files)

    @property
    def is_success(self) -> bool:
        """``True`` when a document exists and no diagnostic has error severity."""
        return self.document is not None and not any(d.is_error for d in self.diagnostics)

    @property
    def is_multi_part(self) -> bool:
        return len(self.part_files) > 0

    @property
    def total_paths(self) -> int:
        return len(self.document.paths) if self.document else 0

    @property
    def total_schemas(self) -> int:
        return len(self.document.schemas) if self.document else 0

    @property
    def total_operations(self) -> int:
        return self.document.operation_count if self.document else 0


# --- Split results ---


class SplitFileContent(BaseModel):
    """One serialised output file of a split."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    content: str
    part_name: Optional[str] = None
    is_base_file: bool = False
    is_common_file: bool = False
    path_count: int = 0
    schema_count: int = 0
    parameter_count: int = 0

    @property
    def estimated_lines(self) -> int:
        return len(self.content.splitlines())


class SplitResult(BaseModel):
    """Outcome of splitting one document into base, part, and common files."""

    model_config = ConfigDict(frozen=True)

    base_file: Optional[SplitFileContent] = None
    part_files: list[SplitFileContent] = Field(default_factory=list)
    common_file: Optional[SplitFileContent] = None
    diagnostics: list[DiagnosticMessage] = Field(default_factory=list)
    strategy: SplitStrategy = SplitStrategy.BY_TAG

    @property
    def all_files(self) -> list[SplitFileContent]:
        files = [self.base_file] if self.base_file is not None else []
        files.extend(self.part_files)
        if self.common_file is not None:
            files.append(self.common_file)
        return files

    @property
    def is_success(self) -> bool:
        return not any(d.is_error for d in self.diagnostics)


class TagAnalysis(BaseModel):
    name: str
    operation_count: int = 0
    schema_count: int = 0
    paths: list[str] = Field(default_factory=list)


class PathSegmentAnalysis(BaseModel):
    segment: str
    path_count: int = 0
    operation_count: int = 0
    schemas: list[str] = Field(default_factory=list)


class SharedSchemaAnalysis(BaseModel):
    name: str
    used_by_domains: list[str] = Field(default_factory=list)


class SuggestedSplit(BaseModel):
    file_name: str
    description: str
    part_name: str
    estimated_operations: int = 0
    estimated_lines: int = 0


SPLIT_LINE_THRESHOLD = 500
SPLIT_OPERATION_THRESHOLD = 15
SPLIT_SCHEMA_THRESHOLD = 20


class SpecificationAnalysis(BaseModel):
    """Pre-split statistics produced by :func:`~specforge.multipart.analysis.analyze`."""

    file_path: str = ""
    total_lines: int = 0
    total_paths: int = 0
    total_operations: int = 0
    total_schemas: int = 0
    total_parameters: int = 0
    tags: list[TagAnalysis] = Field(default_factory=list)
    path_segments: list[PathSegmentAnalysis] = Field(default_factory=list)
    shared_schemas: list[SharedSchemaAnalysis] = Field(default_factory=list)
    recommended_strategy: SplitStrategy = SplitStrategy.BY_PATH_SEGMENT
    recommended_strategy_reason: str = ""
    suggested_splits: list[SuggestedSplit] = Field(default_factory=list)

    @property
    def should_split(self) -> bool:
        """``True`` when any size threshold is exceeded.

        A document without operations or schemas has nothing to partition
        and never qualifies, however long it is.
        """
        if not self.total_operations and not self.total_schemas:
            return False
        return (
            self.total_lines > SPLIT_LINE_THRESHOLD
            or self.total_operations > SPLIT_OPERATION_THRESHOLD
            or self.total_schemas > SPLIT_SCHEMA_THRESHOLD
        )


# --- Resolved extension configuration ---


class CacheConfiguration(BaseModel):
    """Resolved ``x-cache-*`` settings for one operation."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    type: CacheType = CacheType.OUTPUT
    policy: Optional[str] = None
    expiration_seconds: int = 300
    tags: list[str] = Field(default_factory=list)
    vary_by_query: list[str] = Field(default_factory=list)
    vary_by_header: list[str] = Field(default_factory=list)
    vary_by_route: list[str] = Field(default_factory=list)
    mode: CacheMode = CacheMode.HYBRID
    sliding_expiration_seconds: Optional[int] = None
    key_prefix: Optional[str] = None


class RateLimitConfiguration(BaseModel):
    """Resolved ``x-ratelimit-*`` settings for one operation."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    policy: Optional[str] = None
    permit_limit: int = 100
    window_seconds: int = 60
    queue_limit: int = 0
    algorithm: RateLimitAlgorithm = RateLimitAlgorithm.FIXED


class RetryConfiguration(BaseModel):
    """Resolved ``x-retry-*`` settings for one operation."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    policy: Optional[str] = None
    max_attempts: int = 3
    delay_seconds: float = 1.0
    backoff_type: RetryBackoffType = RetryBackoffType.EXPONENTIAL
    use_jitter: bool = True
    timeout_seconds: Optional[float] = None
    circuit_breaker_enabled: bool = False
    circuit_breaker_failure_ratio: float = 0.5
    circuit_breaker_sampling_duration_seconds: float = 30.0
    circuit_breaker_minimum_throughput: int = 10
    circuit_breaker_break_duration_seconds: float = 30.0
    handle_429: bool = True


class SecurityRequirement(BaseModel):
    """One scheme entry of a standard ``security`` requirement object."""

    model_config = ConfigDict(frozen=True)

    scheme_name: str
    scopes: list[str] = Field(default_factory=list)


class SecurityConfiguration(BaseModel):
    """Unified security settings merged from extensions and standard ``security``."""

    model_config = ConfigDict(frozen=True)

    source: SecuritySource = SecuritySource.NONE
    authentication_required: bool = False
    allow_anonymous: bool = False
    roles: list[str] = Field(default_factory=list)
    schemes: list[str] = Field(default_factory=list)
    scopes: list[str] = Field(default_factory=list)
    requirements: list[SecurityRequirement] = Field(default_factory=list)


class ResolvedExtensions(BaseModel):
    """All resolved extension families for a single operation.

    A family that is not configured at any scope is ``None`` -- distinct from
    a configuration object with ``enabled=False``.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    method: HTTPMethod
    operation_id: Optional[str] = None
    cache: Optional[CacheConfiguration] = None
    rate_limit: Optional[RateLimitConfiguration] = None
    retry: Optional[RetryConfiguration] = None
    security: SecurityConfiguration = Field(default_factory=SecurityConfiguration)
