import base64
import io
from pathlib import Path

import pytest
from PIL import Image

from models.design import DesignSystem
from settings import Settings
from utils.fonts import FontMetrics

FIXTURES_DIR = Path(__file__).parent / "fixtures"
SAMPLE_PROJECT_DIR = FIXTURES_DIR / "sample_project"


@pytest.fixture
def sample_project_dir() -> Path:
    """Path to the sample project holding a design.yaml override."""
    return SAMPLE_PROJECT_DIR


@pytest.fixture
def tmp_settings(tmp_path: Path) -> Settings:
    """Settings pointing at an empty project directory (no design.yaml, no stamp).

        data/template/  design.yaml
        data/assets/    stamp logo
        data/output/    CLI output
    """
    for subdir in ("template", "assets"):
        (tmp_path / subdir).mkdir()
    return Settings(project_dir=tmp_path)


@pytest.fixture
def design() -> DesignSystem:
    return DesignSystem()


@pytest.fixture
def metrics() -> FontMetrics:
    """Helvetica metrics — built into reportlab, identical on every machine."""
    return FontMetrics("Helvetica")


def make_image_bytes(fmt: str = "PNG", size: tuple[int, int] = (400, 300), mode: str = "RGB") -> bytes:
    img = Image.new("RGB", size, "orange").convert(mode)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def data_uri(data: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def words(n: int, word: str = "dragon") -> str:
    """A story body of ``n`` words split into paragraphs of 50 words."""
    paragraphs = []
    for start in range(0, n, 50):
        count = min(50, n - start)
        paragraphs.append(" ".join(f"{word}{i}" for i in range(start, start + count)) + ".")
    return "\n\n".join(paragraphs)
