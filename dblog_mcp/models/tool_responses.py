"""Pydantic models for MCP tool responses.

Each tool builds one of these models and serializes it with
``to_json``. Field order is the output key order, and optional fields
are always emitted, as ``null`` when unset, so consumers can rely on a
stable key set.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ToolResponse(BaseModel):
    """Base model emitting camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Serialize with aliases, keeping ``None`` values as explicit nulls."""
        return self.model_dump_json(by_alias=True, indent=indent)


# ============================================================================
# Schema-related response models
# ============================================================================

class TableListResponse(ToolResponse):
    """Response model for list_tables tool."""

    table_count: int = Field(..., ge=0, description="Number of tables in the current schema")
    tables: List[Optional[str]] = Field(default_factory=list, description="Table names, ascending")


class ColumnDescriptor(ToolResponse):
    """One column of a described table."""

    name: Optional[str] = Field(None, description="Column name")
    data_type: Optional[str] = Field(None, description="Declared data type")
    nullable: bool = Field(False, description="Whether the column accepts NULL")
    data_length: Optional[int] = Field(None, description="Maximum character length, if any")
    primary_key: bool = Field(False, description="Whether the column is part of the primary key")


class DescribeTableResponse(ToolResponse):
    """Response model for describe_table tool."""

    table: str = Field(..., description="Table name as given by the caller")
    table_upper: str = Field(..., description="Normalized (uppercase) table name used for lookup")
    found: bool = Field(..., description="Whether the table has any columns")
    primary_key_columns: List[str] = Field(default_factory=list)
    column_count: int = Field(0, ge=0)
    columns: List[ColumnDescriptor] = Field(default_factory=list)


# ============================================================================
# Log-related response models
# ============================================================================

class LogRecord(ToolResponse):
    """A row of the log table, enriched with its category name."""

    id: Optional[int] = None
    comp_type_id: Optional[int] = None
    comp_id: Optional[str] = None
    comp_uid: Optional[str] = None
    created_iso: Optional[str] = None
    created_unix_ms: Optional[int] = None
    log_level_id: Optional[int] = None
    log_category_id: Optional[int] = None
    log_category_name: Optional[str] = None
    log_sub_category: Optional[str] = None
    entry: Optional[str] = None
    user_def_id: Optional[int] = None
    execution_context: Optional[str] = None
    log_error_category_id: Optional[int] = None
    log_code: Optional[int] = None
    api_context: Optional[str] = None


class LogEntrySummary(ToolResponse):
    """Reduced view of a log row used for first/last reporting."""

    id: Optional[int] = None
    created_iso: Optional[str] = None
    created_unix_ms: Optional[int] = None
    entry: Optional[str] = None


class RetrieveLogResponse(ToolResponse):
    """Response model for retrieve_log tool."""

    comp_id: str
    before_iso: Optional[str] = None
    before_unix_ms: Optional[int] = None
    max_records: int
    returned_count: int = Field(..., ge=0)
    records: List[LogRecord] = Field(default_factory=list)


class SummarizeLogResponse(ToolResponse):
    """Response model for summarize_log tool."""

    comp_id: str
    total_entries: int = Field(..., ge=0)
    first_entry: Optional[LogEntrySummary] = None
    last_entry: Optional[LogEntrySummary] = None


class SearchLogResponse(ToolResponse):
    """Response model for search_log tool."""

    comp_id: Optional[str] = None
    start_iso: Optional[str] = None
    start_unix_ms: Optional[int] = None
    end_iso: Optional[str] = None
    end_unix_ms: Optional[int] = None
    returned_count: int = Field(..., ge=0)
    records: List[LogRecord] = Field(default_factory=list)


# ============================================================================
# Query and resource models
# ============================================================================

class QueryResult(BaseModel):
    """Column names plus rows of already-materialized scalar values."""

    columns: List[str] = Field(default_factory=list)
    rows: List[list] = Field(default_factory=list)


class ReleaseNotesIndex(ToolResponse):
    """Available release note versions, newest first."""

    versions: List[str] = Field(default_factory=list)
