"""Site declarations fed into the hierarchy index."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ObservingType(str, Enum):
    """Kinds of observing facility that can take part in a hierarchy."""

    site = "site"
    mobile_platform = "mobile_platform"
    collaboration = "collaboration"
    network = "network"
    array = "array"


class SiteDeclaration(BaseModel):
    """What a site's author publishes: its id, kind and believed sub-sites."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    type: ObservingType = ObservingType.site
    name: str | None = None
    assumed_sub_site_ids: list[str] = Field(default_factory=list)

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("id cannot be empty or whitespace")
        return v

    @property
    def label(self) -> str:
        return self.name or self.id


class SiteManifest(BaseModel):
    """Ordered site declarations. Order is insertion order into the index."""

    sites: list[SiteDeclaration] = Field(default_factory=list)

    @model_validator(mode="after")
    def unique_ids(self) -> SiteManifest:
        seen: set[str] = set()
        for site in self.sites:
            if site.id in seen:
                raise ValueError(f"duplicate site id {site.id!r}")
            seen.add(site.id)
        return self
