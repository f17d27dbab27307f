"""
Shared fixtures: the packaged English table-set and a provider over it.
"""

import pytest

from ttaaii import TtaaiiProvider, load_tables


@pytest.fixture(scope="session")
def tables():
    return load_tables("en")


@pytest.fixture(scope="session")
def provider(tables):
    return TtaaiiProvider(tables=tables)
