import os
import sys
from pathlib import Path

import pytest

# Make 'src' importable without installing the package (same trick as run.py)
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from bubblechart.model.body import BubbleRecord, Size  # noqa: E402


@pytest.fixture(scope="session")
def project_root() -> Path:
    return Path(__file__).resolve().parents[1]


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def viewport() -> Size:
    return Size(800.0, 600.0)


@pytest.fixture
def focal_records() -> list[BubbleRecord]:
    """1 focal body (value 65) + 5 satellites with values 30-40."""
    return [
        BubbleRecord("center", "Attivismo ambientale", 65, is_center=True),
        BubbleRecord("1", "Fondazione Italia Nostra", 40),
        BubbleRecord("2", "Antonella Caroli", 35),
        BubbleRecord("3", "Giulia Maria Crespi", 35),
        BubbleRecord("4", "Mariarita Signorini", 37),
        BubbleRecord("5", "Adele Rossi", 30),
    ]
