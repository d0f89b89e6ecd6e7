import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

DATA_DIR = Path(__file__).resolve().parent / "data"


@pytest.fixture
def city_path() -> Path:
    return DATA_DIR / "city.tsx"


@pytest.fixture
def city(city_path):
    from tilemeta import tsx

    return tsx.load(city_path)
