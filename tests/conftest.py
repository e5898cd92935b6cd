import os
import sys
from pathlib import Path

import pytest

# Ensure the 'src' directory (and the repo root, for tests._helpers) is importable
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
for p in (SRC, ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

# Pin the digest so recorded fixtures stay comparable across environments
os.environ.setdefault("OUTBOX_HASH_ALGORITHM", "sha256")


@pytest.fixture
def leaves():
    from tests._helpers import make_leaves

    return make_leaves(80)
