"""Pydantic models for copy settings and database profiles."""

from pydantic import AliasChoices, BaseModel, Field

from rowclone.schema.models import AssociationIndex


DEFAULT_STRIP_FIELDS = ["id", "created", "modified", "lft", "rght"]


# ============================================================================
# Copy Settings
# ============================================================================


class CopySettings(BaseModel):
    """Per-model copy behavior.

    - recursive: whether to copy has-many and has-one records
    - habtm: whether to duplicate many-to-many join rows
    - strip_fields: fields removed from every copied record
    - ignore: association paths to skip, in dot notation (``"Comment.Reply"``)
    - master_key: field repointed at the new root id after the copy
    """

    recursive: bool = True
    habtm: bool = Field(
        default=True,
        validation_alias=AliasChoices("habtm", "copy_joins"),
    )
    strip_fields: list[str] = Field(
        default_factory=lambda: list(DEFAULT_STRIP_FIELDS),
        validation_alias=AliasChoices("strip_fields", "stripped_fields"),
    )
    ignore: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("ignore", "ignore_paths"),
    )
    master_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("master_key", "master_key_field"),
    )


class CopyConfig(BaseModel):
    """Copy settings registered per model identifier."""

    models: dict[str, CopySettings] = Field(default_factory=dict)

    def settings_for(self, model: str) -> CopySettings | None:
        """Settings for ``model``, or ``None`` when none are registered."""
        return self.models.get(model)


# ============================================================================
# Database Profiles
# ============================================================================


class DatabaseProfile(BaseModel):
    """Database connection profile from rowclone.toml."""

    url: str
    description: str = ""
    db_password: str | None = None  # For [YOUR-PASSWORD] placeholder substitution


class RowcloneConfig(BaseModel):
    """Complete configuration from rowclone.toml."""

    profiles: dict[str, DatabaseProfile] = Field(default_factory=dict)
    index: AssociationIndex = Field(default_factory=AssociationIndex)
    copy_config: CopyConfig = Field(default_factory=CopyConfig)
