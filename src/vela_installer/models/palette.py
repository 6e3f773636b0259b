"""Palette override record written by the Designer preset."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PaletteColors(BaseModel):
    """Accent colors as bare hex strings (no leading '#')."""

    model_config = ConfigDict(populate_by_name=True)

    primary: str
    secondary: str
    tertiary: str
    surface_tint: str = Field(alias="surfaceTint")

    @field_validator("primary", "secondary", "tertiary", "surface_tint", mode="before")
    @classmethod
    def strip_hash(cls, v: str) -> str:
        return v.lstrip("#")


class PaletteOverride(BaseModel):
    """Persisted accent override; replaced wholesale on every write."""

    model_config = ConfigDict(populate_by_name=True)

    active_language: str = Field(default="designer", alias="activeLanguage")
    colors: PaletteColors

    @classmethod
    def from_triple(cls, primary: str, secondary: str, tertiary: str) -> "PaletteOverride":
        return cls(
            colors=PaletteColors(primary=primary, secondary=secondary, tertiary=tertiary, surface_tint=primary)
        )
