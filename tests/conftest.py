import sys
from pathlib import Path

TESTS = Path(__file__).resolve().parent
ROOT = TESTS.parent
SRC = ROOT / "src"

for path in (TESTS, SRC, ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))
