from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator


def _coerce_text(value: Any) -> Optional[str]:
    """Model output is loosely typed: keep strings, stringify numbers, drop the rest."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    return None


def _mapping_items(value: Any) -> List[Dict[str, Any]]:
    if isinstance(value, dict):
        value = [value]
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


Text = Annotated[Optional[str], BeforeValidator(_coerce_text)]


class Section(BaseModel):
    """One content block: a type discriminant plus an open props mapping."""

    type: str
    props: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("type", mode="before")
    @classmethod
    def _type_as_string(cls, value: Any) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @field_validator("props", mode="before")
    @classmethod
    def _props_as_mapping(cls, value: Any) -> Dict[str, Any]:
        return value if isinstance(value, dict) else {}

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "Section":
        return cls.model_validate({"type": raw.get("type"), "props": raw.get("props")})


class LandingPageRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    idea: str
    sections: List[Section] = Field(default_factory=list)
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# Per-type props variants used by the renderer. Every field is optional so a
# partially filled section still renders.


class _Props(BaseModel):
    model_config = ConfigDict(extra="ignore")


class HeroProps(_Props):
    heading: Text = None
    subheading: Text = None
    button_label: Text = Field(default=None, alias="buttonLabel")
    background_image: Text = Field(default=None, alias="backgroundImage")


class FeatureItem(_Props):
    title: Text = None
    description: Text = None


class FeaturesProps(_Props):
    title: Text = None
    features: Annotated[List[FeatureItem], BeforeValidator(_mapping_items)] = Field(default_factory=list)


class TestimonialItem(_Props):
    quote: Text = None
    author: Text = None


class TestimonialsProps(_Props):
    title: Text = None
    testimonials: Annotated[List[TestimonialItem], BeforeValidator(_mapping_items)] = Field(default_factory=list)


class CtaProps(_Props):
    heading: Text = None
    subheading: Text = None
    button_label: Text = Field(default=None, alias="buttonLabel")


class AboutProps(_Props):
    title: Text = None
    description: Text = None


class ContactProps(_Props):
    email: Text = None
    phone: Text = None


class UnknownProps(BaseModel):
    """Catch-all variant: the untyped props of a section outside the known set."""

    model_config = ConfigDict(extra="allow")
