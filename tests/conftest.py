from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.spec_builder import SpecBuilder


ROLE_ADMIN = """
[role]
id = "admin"
name = "Administrator"
"""

GUARD_AUTH = """
[guard]
id = "auth-guard"
name = "Auth Guard"

[relations]
roles = ["admin"]
"""


@pytest.fixture(autouse=True)
def _reset_specbuild_logger() -> Iterator[None]:
    """Drop handlers installed by CLI runs so later tests do not write to closed streams."""
    yield
    logger = logging.getLogger("specbuild")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def spec_builder(tmp_path: Path) -> SpecBuilder:
    """Provide a reusable spec builder rooted at the pytest tmp_path."""
    return SpecBuilder(tmp_path)


@pytest.fixture
def roles_and_guards(spec_builder: SpecBuilder) -> SpecBuilder:
    """A spec tree with one role and one guard referencing it."""
    spec_builder.write(
        {
            "layers/roles/admin.toml": ROLE_ADMIN,
            "layers/guards/auth.toml": GUARD_AUTH,
        }
    )
    return spec_builder
