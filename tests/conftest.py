"""Shared pytest fixtures for Sessão tests."""

from pathlib import Path

import pytest

HELLO_PDL = """\
protocol Hello {
    roles Client, Server

    phase Main {
        Client -> Server: Ping
        Server -> Client: Pong
        end
    }
}
"""


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def pdl_fixtures_dir(fixtures_dir: Path) -> Path:
    """Return path to PDL fixtures directory."""
    return fixtures_dir / "pdl"


@pytest.fixture
def hello_source() -> str:
    """Return the smallest complete, valid protocol."""
    return HELLO_PDL


@pytest.fixture
def bank_source(pdl_fixtures_dir: Path) -> str:
    """Return a protocol exercising every statement and type form."""
    return (pdl_fixtures_dir / "bank.pdl").read_text(encoding="utf-8")
