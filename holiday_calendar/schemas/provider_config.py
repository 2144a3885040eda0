"""Holiday provider configuration schemas.

Provider configs are persisted as one JSON array with camelCase keys,
so every model here reads and writes the camelCase aliases.
"""

from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from holiday_calendar.schemas.holiday import HolidayCategory


class ProviderType(str, Enum):
    NAGER = "nager"
    CALENDARIFIC = "calendarific"
    ABSTRACT = "abstract"
    CUSTOM = "custom"


class ProviderConfig(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(min_length=1, max_length=100)
    name: str
    type: ProviderType
    endpoint: str = Field(validation_alias=AliasChoices("endpoint", "baseUrl"))
    api_key: str | None = None
    country: str = "US"
    category: HolidayCategory = "federal"
    color: str = "#3B82F6"
    type_filter: str | None = None
    # Field mapping hints, only used by custom providers
    date_field: str | None = None
    title_field: str | None = None
    response_path_to_holidays: str | None = None
    enabled: bool = True


class ProviderConfigCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str | None = Field(None, min_length=1, max_length=100)
    name: str = Field(min_length=1)
    type: ProviderType
    endpoint: str = Field(min_length=1, validation_alias=AliasChoices("endpoint", "baseUrl"))
    api_key: str | None = None
    country: str = "US"
    category: HolidayCategory = "federal"
    color: str = "#3B82F6"
    type_filter: str | None = None
    date_field: str | None = None
    title_field: str | None = None
    response_path_to_holidays: str | None = None
    enabled: bool = True


class ProviderConfigUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str | None = None
    type: ProviderType | None = None
    endpoint: str | None = Field(None, validation_alias=AliasChoices("endpoint", "baseUrl"))
    api_key: str | None = None
    country: str | None = None
    category: HolidayCategory | None = None
    color: str | None = None
    type_filter: str | None = None
    date_field: str | None = None
    title_field: str | None = None
    response_path_to_holidays: str | None = None
    enabled: bool | None = None
