# config.py
import json
from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .enums import MetadataField, UploadType
from .exceptions import InvalidConfigurationValue


def _all_metadata_fields() -> List[str]:
    return [field.value for field in MetadataField]


class Configuration(BaseModel):
    """
    Adapter configuration: root prefix, default upload preset and the extra
    descriptor fields copied into file metadata.

    The adapter keeps a reference to this object, so assignments made after the
    adapter is built (e.g. a new prefix) are picked up by the next operation.
    Every assignment is validated.
    """

    model_config = ConfigDict(validate_assignment=True)

    prefix: str = ""
    upload_preset: Optional[str] = None
    extra_metadata_fields: List[str] = Field(default_factory=_all_metadata_fields)

    def __init__(self, **data):
        # No fields at construction means "use every known field".
        if not data.get("extra_metadata_fields"):
            data["extra_metadata_fields"] = _all_metadata_fields()
        super().__init__(**data)

    @field_validator("prefix", mode="before")
    @classmethod
    def validate_prefix(cls, value):
        if value is None:
            return ""
        if not isinstance(value, str):
            raise InvalidConfigurationValue(f"Invalid prefix [{value}]. Must be a string.")
        return value

    @field_validator("extra_metadata_fields", mode="before")
    @classmethod
    def validate_extra_metadata_fields(cls, value):
        if value is None:
            return []
        valid_fields = {field.value for field in MetadataField}
        fields = []
        for field in value:
            if isinstance(field, MetadataField):
                field = field.value
            if not isinstance(field, str) or field == "" or field not in valid_fields:
                raise InvalidConfigurationValue(
                    f"Invalid metadata field [{field}]. Must be string and one of [{','.join(sorted(valid_fields))}]."
                )
            fields.append(field)
        return fields

    @classmethod
    def default(cls) -> "Configuration":
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> "Configuration":
        return cls(**data)

    def to_dict(self) -> dict:
        return self.model_dump()

    def __str__(self) -> str:
        return json.dumps(self.to_dict())


class Settings(BaseSettings):
    """
    Environment driven settings used by initialize_adapter().
    Reads variables from the environment and an optional .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    CLOUDINARY_URL: str
    CLOUDINARY_PREFIX: str = ""
    CLOUDINARY_UPLOAD_PRESET: Optional[str] = None
    CLOUDINARY_EXTRA_METADATA_FIELDS: List[str] = Field(default_factory=list)
    CLOUDINARY_PRIVATE_UPLOAD_TYPE: str = UploadType.AUTHENTICATED.value

    # --- Resource type classification overrides (optional) ---
    CLOUDINARY_IMAGE_TYPES: Optional[List[str]] = None
    CLOUDINARY_VIDEO_TYPES: Optional[List[str]] = None
    CLOUDINARY_AUDIO_TYPES: Optional[List[str]] = None

    LOG_LEVEL: str = "INFO"
    LOGGING_ENABLED: bool = False

    @model_validator(mode="after")
    def validate_settings(self):
        if not self.CLOUDINARY_URL.startswith("cloudinary://"):
            raise ValueError("CLOUDINARY_URL must start with 'cloudinary://'")

        private_types = (UploadType.AUTHENTICATED.value, UploadType.PRIVATE.value)
        if self.CLOUDINARY_PRIVATE_UPLOAD_TYPE not in private_types:
            raise ValueError(
                "Invalid CLOUDINARY_PRIVATE_UPLOAD_TYPE. Must be 'authenticated' or 'private'."
            )
        return self

    def to_configuration(self) -> Configuration:
        return Configuration(
            prefix=self.CLOUDINARY_PREFIX,
            upload_preset=self.CLOUDINARY_UPLOAD_PRESET or None,
            extra_metadata_fields=self.CLOUDINARY_EXTRA_METADATA_FIELDS,
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Returns a cached instance of the application settings.
    The first call to this function will initialize the settings.
    """
    return Settings()
