# FlexiSync Configuration Schema
# Pydantic models for YAML data configuration validation

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class DataOperation(str, Enum):
    """Operation requested for a save."""

    UPSERT = "upsert"
    DELETE = "delete"


class SaveOperationKey(str, Enum):
    """Built-in save operation keys."""

    STANDARD = "standard"
    DEFAULT = "default"
    BULK = "bulk"
    BOURNE = "bourne"


DEFAULT_REST_PATH = "/JSON/bourne/v1"


class ObjectConfig(BaseModel):
    """Configuration for a single object type to sync."""

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    object_type: str = Field(
        default="",
        validation_alias=AliasChoices("object_type", "sObjectType", "object"),
        description="API name of the object type",
    )
    query: str | None = Field(default=None, description="Query used to export records")
    external_id: str = Field(
        default="Id",
        validation_alias=AliasChoices("external_id", "externalid", "externalId"),
        description="Field uniquely identifying a record across systems",
    )
    directory: str | None = Field(default=None, description="Data directory for this object (default: object type)")
    filename: str | None = Field(default=None, description="Field used to name exported files (default: external id)")
    cleanup_fields: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("cleanup_fields", "cleanupFields"),
        description="Relationship fields whose null value clears the lookup",
    )
    has_record_types: bool = Field(
        default=False,
        validation_alias=AliasChoices("has_record_types", "hasRecordTypes"),
        description="Resolve record type developer names to ids on import",
    )
    save_operation: str | None = Field(
        default=None,
        validation_alias=AliasChoices("save_operation", "importHandler", "saveOperation"),
        description="Save operation override for this object",
    )
    fan_out: bool = Field(
        default=False,
        validation_alias=AliasChoices("fan_out", "enableMultiThreading"),
        description="Dispatch all chunks of an attempt concurrently",
    )

    @property
    def directory_name(self) -> str:
        """Directory name holding this object's record files."""
        return self.directory or self.object_type

    @property
    def filename_field(self) -> str:
        """Field whose value names each exported record file."""
        return self.filename or self.external_id


class BulkConfig(BaseModel):
    """Settings for the bulk REST save operation."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    rest_path: str = Field(
        default=DEFAULT_REST_PATH,
        validation_alias=AliasChoices("rest_path", "restPath"),
        description="Apex REST path receiving save requests",
    )


class DataConfig(BaseModel):
    """Root data configuration for a run."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    objects: list[ObjectConfig] | dict[str, ObjectConfig] = Field(
        default_factory=list, description="Object configurations as a list or keyed by object type"
    )
    all_objects: list[str] | None = Field(
        default=None,
        validation_alias=AliasChoices("all_objects", "allObjects"),
        description="Processing order for the mapping form of objects",
    )
    payload_length: int | None = Field(
        default=None,
        validation_alias=AliasChoices("payload_length", "payloadLength"),
        description="Maximum serialized size of a single save request",
    )
    import_retries: int = Field(
        default=0,
        validation_alias=AliasChoices("import_retries", "importRetries"),
        description="Attempts per object; 0 means a single attempt",
    )
    allow_partial: bool = Field(
        default=False,
        validation_alias=AliasChoices("allow_partial", "allowPartial"),
        description="Accept partially successful imports",
    )
    save_operation: str | None = Field(
        default=None,
        validation_alias=AliasChoices("save_operation", "importHandler", "saveOperation"),
        description="Default save operation key",
    )
    bulk: BulkConfig = Field(
        default_factory=BulkConfig,
        validation_alias=AliasChoices("bulk", "bourne"),
        description="Bulk REST settings",
    )
    data_dir: str = Field(
        default="data",
        validation_alias=AliasChoices("data_dir", "dataDir"),
        description="Base directory for record files",
    )
    hooks: dict[str, list[str]] = Field(default_factory=dict, description="Hook event to function references")

    @model_validator(mode="before")
    @classmethod
    def assign_object_types(cls, data: Any) -> Any:
        """Give mapping-form object entries their key as object type."""
        if isinstance(data, dict):
            objects = data.get("objects")
            if isinstance(objects, dict):
                data = {**data}
                data["objects"] = {
                    name: {"object_type": name, **(entry or {})} if isinstance(entry, dict) else entry
                    for name, entry in objects.items()
                }
        return data

    @field_validator("hooks", mode="before")
    @classmethod
    def normalize_hooks(cls, v: Any) -> Any:
        """Allow a single reference per hook instead of a list."""
        if isinstance(v, dict):
            return {name: [refs] if isinstance(refs, str) else refs for name, refs in v.items()}
        return v

    @field_validator("import_retries")
    @classmethod
    def non_negative_retries(cls, v: int) -> int:
        """Reject negative retry counts."""
        if v < 0:
            raise ValueError("import_retries must not be negative")
        return v

    @property
    def max_attempts(self) -> int:
        """Number of save attempts per object."""
        return max(self.import_retries, 1)

    def get_object(self, object_type: str) -> ObjectConfig | None:
        """Get an object configuration by object type."""
        if isinstance(self.objects, dict):
            return self.objects.get(object_type)
        for object_config in self.objects:
            if object_config.object_type == object_type:
                return object_config
        return None

    def object_list(self) -> list[ObjectConfig]:
        """Return all object configurations in declared order."""
        if isinstance(self.objects, dict):
            return list(self.objects.values())
        return list(self.objects)
