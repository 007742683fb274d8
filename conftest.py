"""Configure pytest for HealPet."""
import os
import tempfile
from pathlib import Path

import pytest

# =============================================================================
# Test Environment Configuration
# =============================================================================
# Set BEFORE any project imports: persistence.db reads HEALPET_DB_PATH and
# auth.password reads HEALPET_BCRYPT_ROUNDS at import time.
_TEST_DB_DIR = tempfile.mkdtemp(prefix="healpet-test-")
os.environ["HEALPET_DB_PATH"] = str(Path(_TEST_DB_DIR) / "healpet.db")
os.environ["HEALPET_BCRYPT_ROUNDS"] = "4"
os.environ.setdefault("ENV", "test")
os.environ.setdefault("GROQ_API_KEY", "test-groq-key")


@pytest.fixture
def fresh_db():
    """Empty schema for each test that touches the database."""
    from persistence.db import init_db, reset_db

    reset_db()
    init_db()
    yield
    reset_db()
