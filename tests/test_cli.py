# tests/test_cli.py
from pathlib import Path
from typing import Generator

import pytest
from typer.testing import CliRunner

from claimledger.cli.main import app
from claimledger.core.encoding import hash_content

runner = CliRunner()

DOC_HEX = hash_content(b"cli document").hex()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path: Path):
    """Keep the real ~/.claimledger and env settings out of the tests."""
    monkeypatch.delenv("CLAIMLEDGER_UNSAFE_MINT", raising=False)
    monkeypatch.setenv("CLAIMLEDGER_DB_PATH", str(tmp_path / "missing" / "none.db"))


@pytest.fixture
def temp_db(tmp_path: Path) -> Generator[Path, None, None]:
    db_path = tmp_path / "test-cli.db"
    yield db_path
    if db_path.exists():
        db_path.unlink()


@pytest.fixture
def populated_db(temp_db: Path) -> Path:
    """DB with alice=100, bob=50 at block 1."""
    result = runner.invoke(app, ["--db", str(temp_db), "init", "-b", "alice=100", "-b", "bob=50"])
    assert result.exit_code == 0, result.stdout
    return temp_db


def test_no_db():
    result = runner.invoke(app, ["accounts"])
    assert result.exit_code == 1
    assert "not found" in result.stdout.lower()
    assert "to get started" in result.stdout.lower()


def test_init_writes_genesis(populated_db: Path):
    result = runner.invoke(app, ["--db", str(populated_db), "accounts"])
    assert result.exit_code == 0
    assert "alice" in result.stdout
    assert "bob" in result.stdout
    assert "Total issuance: 150" in result.stdout


def test_init_rejects_bad_balance(temp_db: Path):
    result = runner.invoke(app, ["--db", str(temp_db), "init", "-b", "alice"])
    assert result.exit_code == 1
    assert "expected who=amount" in result.stdout.lower()


def test_init_twice_fails(populated_db: Path):
    result = runner.invoke(app, ["--db", str(populated_db), "init", "-b", "carol=1"])
    assert result.exit_code == 1
    assert "genesis failed" in result.stdout.lower()


def test_db_from_env(populated_db: Path, monkeypatch):
    monkeypatch.setenv("CLAIMLEDGER_DB_PATH", str(populated_db))
    result = runner.invoke(app, ["balance", "alice"])
    assert result.exit_code == 0
    assert "alice: 100" in result.stdout


def test_transfer_and_events(populated_db: Path):
    result = runner.invoke(app, ["--db", str(populated_db), "transfer", "carol", "30", "--as", "alice"])
    assert result.exit_code == 0
    assert "Balances.transfer succeeded" in result.stdout
    assert "Transferred" in result.stdout

    result = runner.invoke(app, ["--db", str(populated_db), "balance", "carol"])
    assert "carol: 30" in result.stdout

    result = runner.invoke(app, ["--db", str(populated_db), "events"])
    assert result.exit_code == 0
    assert "Balances.Transferred" in result.stdout
    assert '"amount":"30"' in result.stdout


def test_transfer_insufficient_balance(populated_db: Path):
    result = runner.invoke(app, ["--db", str(populated_db), "transfer", "alice", "51", "--as", "bob"])
    assert result.exit_code == 1
    assert "InsufficientBalance" in result.stdout


def test_transfer_from_unknown_account(populated_db: Path):
    result = runner.invoke(app, ["--db", str(populated_db), "transfer", "alice", "1", "--as", "carol"])
    assert result.exit_code == 1
    assert "NonExistentAccount" in result.stdout


def test_mint(populated_db: Path):
    result = runner.invoke(app, ["--db", str(populated_db), "mint", "dave", "5", "--as", "bob"])
    assert result.exit_code == 0

    result = runner.invoke(app, ["--db", str(populated_db), "accounts"])
    assert "Total issuance: 155" in result.stdout


def test_mint_disabled_by_flag(populated_db: Path):
    result = runner.invoke(app, ["--db", str(populated_db), "--no-mint", "mint", "dave", "5", "--as", "bob"])
    assert result.exit_code == 1
    assert "CallFiltered" in result.stdout


def test_mint_disabled_by_env(populated_db: Path, monkeypatch):
    monkeypatch.setenv("CLAIMLEDGER_UNSAFE_MINT", "0")
    result = runner.invoke(app, ["--db", str(populated_db), "mint", "dave", "5", "--as", "bob"])
    assert result.exit_code == 1
    assert "CallFiltered" in result.stdout


def test_claim_lifecycle(populated_db: Path):
    db = ["--db", str(populated_db)]

    result = runner.invoke(app, db + ["create-claim", "--hash", DOC_HEX, "--as", "alice"])
    assert result.exit_code == 0
    assert "Claims.create_claim succeeded" in result.stdout

    result = runner.invoke(app, db + ["claims"])
    assert DOC_HEX in result.stdout
    assert "owner=alice" in result.stdout

    result = runner.invoke(app, db + ["create-claim", "--hash", DOC_HEX, "--as", "bob"])
    assert result.exit_code == 1
    assert "AlreadyClaimed" in result.stdout

    result = runner.invoke(app, db + ["revoke-claim", "--hash", DOC_HEX, "--as", "bob"])
    assert result.exit_code == 1
    assert "NotClaimOwner" in result.stdout

    result = runner.invoke(app, db + ["revoke-claim", "--hash", DOC_HEX, "--as", "alice"])
    assert result.exit_code == 0

    result = runner.invoke(app, db + ["revoke-claim", "--hash", DOC_HEX, "--as", "alice"])
    assert result.exit_code == 1
    assert "NoSuchClaim" in result.stdout


def test_create_claim_from_file(populated_db: Path, tmp_path: Path):
    doc = tmp_path / "doc.txt"
    doc.write_bytes(b"cli document")

    result = runner.invoke(app, ["--db", str(populated_db), "create-claim", "--file", str(doc), "--as", "alice"])
    assert result.exit_code == 0
    assert DOC_HEX in result.stdout


def test_create_claim_needs_one_source(populated_db: Path):
    result = runner.invoke(app, ["--db", str(populated_db), "create-claim", "--as", "alice"])
    assert result.exit_code == 1
    assert "exactly one" in result.stdout


def test_advance_clears_events(populated_db: Path):
    db = ["--db", str(populated_db)]
    runner.invoke(app, db + ["transfer", "bob", "1", "--as", "alice"])

    result = runner.invoke(app, db + ["advance"])
    assert result.exit_code == 0
    assert "block 2" in result.stdout

    result = runner.invoke(app, db + ["events"])
    assert "No events in block 2" in result.stdout


def test_verify_valid_state(populated_db: Path):
    result = runner.invoke(app, ["--db", str(populated_db), "verify"])
    assert result.exit_code == 0
    assert "valid" in result.stdout.lower()


def test_info(populated_db: Path):
    result = runner.invoke(app, ["--db", str(populated_db), "info"])
    assert result.exit_code == 0
    assert "claimledger-runtime" in result.stdout
    assert "XYZ" in result.stdout
    assert "Block: 1" in result.stdout


def test_mint_amount_out_of_range(populated_db: Path):
    result = runner.invoke(app, ["--db", str(populated_db), "mint", "bob", str(2**128), "--as", "alice"])
    assert result.exit_code == 1
    assert "Invalid input" in result.stdout
    assert "u128" in result.stdout


def test_transfer_to_empty_account(populated_db: Path):
    result = runner.invoke(app, ["--db", str(populated_db), "transfer", "", "5", "--as", "alice"])
    assert result.exit_code == 1
    assert "Invalid input" in result.stdout

    result = runner.invoke(app, ["--db", str(populated_db), "balance", "alice"])
    assert "alice: 100" in result.stdout


def test_init_rejects_non_ascii_digits(temp_db: Path):
    result = runner.invoke(app, ["--db", str(temp_db), "init", "-b", "alice=²"])
    assert result.exit_code == 1
    assert "expected who=amount" in result.stdout.lower()
