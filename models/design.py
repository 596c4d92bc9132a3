"""Design system model — typed representation of design.yaml.

Loaded once per process and passed to every stage that needs geometry,
typography or colours. All measurements are PDF points (1/72 inch).
"""
from pathlib import Path

from pydantic import BaseModel, Field, model_validator


class PageGeometry(BaseModel):
    width_pt: float = 595.28   # A4 portrait
    height_pt: float = 841.89
    margin_pt: float = 40.0
    page_count: int = Field(default=3, ge=1)

    @property
    def content_width_pt(self) -> float:
        return self.width_pt - 2 * self.margin_pt


class ImageBox(BaseModel):
    """The reservation box set aside for an illustration on the right of a page."""
    width_pt: float = Field(default=220.0, gt=0)
    height_pt: float = Field(default=260.0, gt=0)
    gutter_pt: float = Field(default=14.0, ge=0)
    shadow_offset_pt: float = 6.0
    shadow_opacity: float = Field(default=0.22, ge=0.0, le=1.0)


class TextStyle(BaseModel):
    font: str = "Helvetica"
    size_pt: float = Field(default=16.0, gt=0)
    color: str = "#1A1A1A"


class Typography(BaseModel):
    title: TextStyle = Field(default_factory=lambda: TextStyle(font="Helvetica-Bold", size_pt=22.0))
    subtitle: TextStyle = Field(default_factory=lambda: TextStyle(size_pt=11.0, color="#333333"))
    body: TextStyle = Field(default_factory=TextStyle)
    min_body_size_pt: float = Field(default=11.0, gt=0)
    title_gap_pt: float = 10.0
    subtitle_gap_pt: float = 12.0

    @model_validator(mode="after")
    def min_size_not_above_preferred(self) -> "Typography":
        if self.min_body_size_pt > self.body.size_pt:
            raise ValueError("min_body_size_pt must not exceed body.size_pt")
        return self


class Stamp(BaseModel):
    size_pt: float = Field(default=56.0, gt=0)
    rotation_deg: float = -8.0
    offset_x_pt: float = -6.0
    offset_y_pt: float = 8.0


class DesignSystem(BaseModel):
    """Complete design system loaded from design.yaml.

    Provides defaults for every field so it is usable even when design.yaml
    is absent or partially specified.
    """
    page: PageGeometry = Field(default_factory=PageGeometry)
    image_box: ImageBox = Field(default_factory=ImageBox)
    typography: Typography = Field(default_factory=Typography)
    stamp: Stamp = Field(default_factory=Stamp)

    @classmethod
    def load(cls, path: Path) -> "DesignSystem":
        """Load from a YAML file. Missing fields use Pydantic defaults.

        Raises FileNotFoundError if path does not exist.
        """
        import yaml  # lazy — only needed at load time
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        return cls.model_validate(data)

    @classmethod
    def load_or_default(cls, path: Path) -> "DesignSystem":
        """Load from path if it exists, otherwise return default design system."""
        if path.exists():
            return cls.load(path)
        return cls()
