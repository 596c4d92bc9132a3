import logging
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_STAMP_EXTENSIONS = ("*.png", "*.PNG", "*.jpg", "*.JPG", "*.jpeg", "*.JPEG")


class Settings(BaseSettings):
    project_dir: Path = Path("./data")
    product_name: str = "Poplicuentos"
    default_title: str = "Untitled story"
    uppercase_body: bool = True
    image_fetch_timeout: float = 15.0
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BOOKLET_",
        env_file_encoding="utf-8",
    )

    @field_validator("image_fetch_timeout")
    @classmethod
    def timeout_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("image_fetch_timeout must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log_level: {v}")
        return level

    @property
    def template_dir(self) -> Path:
        return self.project_dir / "template"

    @property
    def assets_dir(self) -> Path:
        return self.project_dir / "assets"

    @property
    def output_dir(self) -> Path:
        return self.project_dir / "output"

    @property
    def design_yaml_path(self) -> Path:
        return self.template_dir / "design.yaml"

    @property
    def stamp_logo_path(self) -> Path | None:
        """First raster logo in the assets directory, or None."""
        if not self.assets_dir.exists():
            return None
        for ext in _STAMP_EXTENSIONS:
            matches = sorted(
                p for p in self.assets_dir.glob(ext)
                if not p.name.endswith(":Zone.Identifier")
            )
            if matches:
                return matches[0]
        return None
