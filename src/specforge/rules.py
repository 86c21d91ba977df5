"""Stable rule identifiers attached to every :class:`~specforge.models.DiagnosticMessage`.

Identifiers have the form ``SF_<CATEGORY><NNN>`` and never change meaning
once published, so downstream tooling can filter or suppress findings by id
without parsing message text. Categories:

* ``GEN`` -- general parse / load failures
* ``VAL`` -- core document validity
* ``NAM`` -- naming conventions
* ``SEC`` -- security role and scheme cross-references
* ``SRV`` -- server declarations
* ``SCH`` -- schema shape and naming
* ``PTH`` -- path templates
* ``OPR`` -- operation conventions
* ``WBH`` -- webhooks
* ``MPT`` -- multi-part merge and split
"""

# --- General ---

PARSING_ERROR = "SF_GEN002"
"""A specification file could not be read or parsed."""

# --- Core validity ---

OPENAPI_CORE_ERROR = "SF_VAL001"
"""Structural error reported while reading the document."""

OPENAPI_20_NOT_SUPPORTED = "SF_VAL002"
"""The document is Swagger / OpenAPI 2.0."""

# --- Naming ---

OPERATION_ID_MUST_BE_CAMEL_CASE = "SF_NAM001"
MODEL_NAME_MUST_BE_PASCAL_CASE = "SF_NAM002"
PROPERTY_NAME_MUST_BE_CAMEL_CASE = "SF_NAM003"
PARAMETER_NAME_MUST_BE_CAMEL_CASE = "SF_NAM004"
ENUM_VALUE_CASING = "SF_NAM005"
TAG_NAME_MUST_BE_KEBAB_CASE = "SF_NAM006"

# --- Security ---

PATH_AUTHORIZE_ROLE_NOT_DEFINED = "SF_SEC001"
PATH_AUTHENTICATION_SCHEME_NOT_DEFINED = "SF_SEC002"
OPERATION_AUTHORIZE_ROLE_NOT_DEFINED = "SF_SEC003"
OPERATION_AUTHENTICATION_SCHEME_NOT_DEFINED = "SF_SEC004"
OPERATION_AUTHENTICATION_CONFLICT = "SF_SEC005"
OPERATION_AUTHORIZE_ROLE_CASING = "SF_SEC006"
OPERATION_AUTHENTICATION_SCHEME_CASING = "SF_SEC007"
PATH_AUTHORIZE_ROLE_CASING = "SF_SEC008"
PATH_AUTHENTICATION_SCHEME_CASING = "SF_SEC009"
PATH_AUTHENTICATION_CONFLICT = "SF_SEC010"

# --- Servers ---

INVALID_SERVER_URL = "SF_SRV001"

# --- Schemas ---

ARRAY_TITLE_MISSING = "SF_SCH001"
ARRAY_TITLE_NOT_UPPERCASE = "SF_SCH002"
OBJECT_TITLE_MISSING = "SF_SCH003"
OBJECT_TITLE_NOT_UPPERCASE = "SF_SCH004"
IMPLICIT_ARRAY_OBJECT_NOT_SUPPORTED = "SF_SCH005"
OBJECT_NAME_CASING = "SF_SCH006"
PROPERTY_NAME_CASING = "SF_SCH007"
ENUM_NAME_CASING = "SF_SCH008"
ARRAY_PROPERTY_MISSING_TYPE = "SF_SCH009"
IMPLICIT_OBJECT_NOT_SUPPORTED = "SF_SCH010"
ARRAY_PROPERTY_MISSING_ITEMS = "SF_SCH011"
PROPERTY_KEY_MISSING = "SF_SCH012"
INVALID_SCHEMA_REFERENCE = "SF_SCH013"
MULTIPLE_NON_NULL_TYPES = "SF_SCH014"
REF_WITH_SIBLING_PROPERTIES = "SF_SCH015"
SCHEMA_USES_CONST_VALUE = "SF_SCH016"
UNEVALUATED_PROPERTIES_NOT_SUPPORTED = "SF_SCH017"

# --- Paths ---

PATH_PARAMETERS_NOT_WELL_FORMATTED = "SF_PTH001"

# --- Operations ---

OPERATION_ID_MISSING = "SF_OPR001"
OPERATION_ID_CASING = "SF_OPR002"
GET_OPERATION_ID_PREFIX = "SF_OPR003"
POST_OPERATION_ID_PREFIX = "SF_OPR004"
PUT_OPERATION_ID_PREFIX = "SF_OPR005"
PATCH_OPERATION_ID_PREFIX = "SF_OPR006"
DELETE_OPERATION_ID_PREFIX = "SF_OPR007"
OPERATION_ID_PLURALIZATION_MISMATCH = "SF_OPR008"
OPERATION_ID_SINGULAR_MISMATCH = "SF_OPR009"
BAD_REQUEST_WITHOUT_PARAMETERS = "SF_OPR010"
GLOBAL_PATH_PARAMETER_NOT_IN_ROUTE = "SF_OPR011"
OPERATION_MISSING_PATH_PARAMETER = "SF_OPR012"
OPERATION_PATH_PARAMETER_NOT_IN_ROUTE = "SF_OPR013"
GET_MISSING_NOT_FOUND_RESPONSE = "SF_OPR014"
PATH_PARAMETER_NOT_REQUIRED = "SF_OPR015"
PATH_PARAMETER_NULLABLE = "SF_OPR016"
REQUEST_BODY_INLINE_MODEL = "SF_OPR017"
MULTIPLE_2XX_STATUS_CODES = "SF_OPR018"
UNAUTHORIZED_WITHOUT_SECURITY = "SF_OPR021"
FORBIDDEN_WITHOUT_AUTHORIZATION = "SF_OPR022"
NOT_FOUND_ON_POST_OPERATION = "SF_OPR023"
CONFLICT_ON_NON_MUTATING_OPERATION = "SF_OPR024"
TOO_MANY_REQUESTS_WITHOUT_RATE_LIMITING = "SF_OPR025"

# --- Webhooks ---

WEBHOOK_MISSING_OPERATION_ID = "SF_WBH001"
WEBHOOK_MISSING_REQUEST_BODY = "SF_WBH002"
WEBHOOKS_DETECTED = "SF_WBH003"

# --- Multi-part ---

DUPLICATE_PATH_IN_PART = "SF_MPT001"
"""A path key appears in more than one file under a non-overriding strategy."""

DUPLICATE_SCHEMA_IN_PART = "SF_MPT002"
"""A component key appears in more than one file under a non-overriding strategy."""

PART_FILE_CONTAINS_PROHIBITED_SECTION = "SF_MPT003"
"""A part file declares ``servers`` or ``securitySchemes``; they are ignored."""

MULTI_PART_MERGE_SUCCESSFUL = "SF_MPT004"
PART_FILE_NOT_FOUND = "SF_MPT005"
UNRESOLVED_REFERENCE_AFTER_MERGE = "SF_MPT006"

PART_FILE_HAS_INFO_VERSION = "SF_MPT007"
"""A part file declares ``info.version``; only the base file's info is kept."""

BASE_FILE_NOT_FOUND = "SF_MPT008"

DUPLICATE_PARAMETER_IN_PART = "SF_MPT009"
"""A component parameter differs between files under ``MergeIfIdentical``."""

SPLIT_PATH_SPANS_GROUPS = "SF_MPT010"
"""Operations of one path belong to different split groups; the path goes to the first."""

DUPLICATE_TAG_IN_PART = "SF_MPT011"
INVALID_MULTIPART_CONFIGURATION = "SF_MPT012"


_CATEGORY_ORDER = ("GEN", "VAL", "MPT", "PTH", "SRV", "SEC", "NAM", "SCH", "OPR", "WBH")


def rule_priority(rule_id: str) -> tuple[int, str]:
    """Return a sort key ordering rules by category, then by number.

    Unknown categories sort after all known ones. Used by
    :func:`~specforge.diagnostics.sort_diagnostics` to give diagnostic lists a
    deterministic order.
    """
    body = rule_id[3:] if rule_id.startswith("SF_") else rule_id
    category = body[:3]
    try:
        rank = _CATEGORY_ORDER.index(category)
    except ValueError:
        rank = len(_CATEGORY_ORDER)
    return rank, body
