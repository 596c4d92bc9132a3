"""Stage contract models for a single booklet request.

Nothing here is persisted: every model is built and discarded within one
call to ``pipeline.booklet.build_booklet``.
"""
from typing import Literal

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_IMAGES = 3


class BookletRequest(BaseModel):
    """Raw input as received from the HTTP layer or the CLI.

    ``story_text`` defaults to an empty string so that a missing field reaches
    the normalizer and is reported the same way as an empty one.
    """

    title: str | None = None
    story_text: str = ""
    images: list[str | None] = Field(default_factory=list)

    @field_validator("images")
    @classmethod
    def keep_first_three(cls, v: list[str | None]) -> list[str | None]:
        return v[:MAX_IMAGES]


class NormalizedStory(BaseModel):
    title: str     # display (uppercase) title
    subtitle: str  # imprint line under the title
    paragraphs: list[str]

    @property
    def text(self) -> str:
        return "\n\n".join(self.paragraphs)


class LayoutBox(BaseModel):
    """A rectangular region of one page into which lines are placed.

    ``y_top`` is the first baseline; lines grow downwards towards ``y_bottom``.
    """

    model_config = ConfigDict(frozen=True)

    page_index: int = Field(ge=0)
    x: float
    y_top: float
    width: float
    height: float

    @property
    def y_bottom(self) -> float:
        return self.y_top - self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y_top - self.height / 2


class LayoutLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    page_index: int = Field(ge=0)
    box_index: int = Field(ge=0)
    x: float
    y: float  # baseline


class LayoutResult(BaseModel):
    lines: list[LayoutLine] = Field(default_factory=list)
    overflow: bool = False


class FittedLayout(BaseModel):
    """Outcome of the font-size back-off."""

    font_size: float
    lines: list[LayoutLine] = Field(default_factory=list)
    overflow: bool = False
    truncated: bool = False
    attempts: list[float] = Field(default_factory=list)


class DecodedImage(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    format: Literal["PNG", "JPEG"]
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    image: Image.Image


class ImagePlacement(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    page_index: int = Field(ge=0)
    box: LayoutBox
    x: float
    y: float  # bottom edge, PDF coordinates
    width: float
    height: float
    source: DecodedImage
