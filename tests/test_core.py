# tests/test_core.py
import pytest

from claimledger.core.canon import canonical_json, canonical_json_str, from_canonical
from claimledger.core.encoding import claim_id_hex, hash_content, parse_claim_id
from claimledger.core.errors import (
    AlreadyClaimed,
    BalancesError,
    ClaimsError,
    DispatchError,
    InsufficientBalance,
    NotClaimOwner,
)
from claimledger.core.types import (
    BALANCE_MAX,
    Claim,
    ClaimCreated,
    EventRecord,
    Transferred,
    checked_add,
    checked_sub,
    ensure_account,
    ensure_balance,
)


def test_checked_sub_boundary():
    assert checked_sub(100, 100) == 0
    assert checked_sub(100, 101) is None


def test_checked_add_boundary():
    assert checked_add(BALANCE_MAX - 1, 1) == BALANCE_MAX
    assert checked_add(BALANCE_MAX, 1) is None


def test_ensure_balance():
    assert ensure_balance(0) == 0
    assert ensure_balance(BALANCE_MAX) == BALANCE_MAX
    with pytest.raises(ValueError):
        ensure_balance(-1)
    with pytest.raises(TypeError):
        ensure_balance(True)
    with pytest.raises(TypeError):
        ensure_balance("10")


def test_ensure_account():
    assert ensure_account("alice") == "alice"
    with pytest.raises(ValueError):
        ensure_account("")
    with pytest.raises(TypeError):
        ensure_account(42)


def test_claim_immutable():
    claim = Claim(owner="alice", height=1)
    with pytest.raises(AttributeError):
        claim.owner = "bob"


def test_transferred_to_dict_uses_from_key():
    event = Transferred(from_="alice", to="bob", amount=BALANCE_MAX)
    d = event.to_dict()
    assert d == {"from": "alice", "to": "bob", "amount": str(BALANCE_MAX)}
    assert Transferred.from_dict(d) == event


def test_event_record_round_trip():
    claim = hash_content(b"doc")
    record = EventRecord(block=3, index=0, event=ClaimCreated(who="alice", claim=claim))
    d = record.to_dict()

    assert d["pallet"] == "Claims"
    assert d["event"] == "ClaimCreated"
    assert d["data"]["claim"] == claim.hex()
    assert EventRecord.from_dict(from_canonical(canonical_json_str(d))) == record


def test_event_record_unknown_type():
    with pytest.raises(ValueError, match="Unknown event"):
        EventRecord.from_dict({"block": 1, "index": 0, "pallet": "Staking", "event": "Bonded", "data": {}})


def test_error_names_and_modules():
    err = InsufficientBalance("alice holds 1")
    assert isinstance(err, BalancesError)
    assert isinstance(err, DispatchError)
    assert err.module == "Balances"
    assert err.name == "InsufficientBalance"
    assert "Balances.InsufficientBalance" in str(err)

    assert isinstance(NotClaimOwner(), ClaimsError)
    assert AlreadyClaimed().message == "The claim already exists."


def test_hash_content_is_blake2b_256():
    digest = hash_content(b"")
    assert len(digest) == 32
    # BLAKE2b-256 of the empty string
    assert digest.hex() == "0e5751c026e543b2e8ab2eb06099daa1d1e5df47778f7787faab45cdf12fe3a8"


def test_parse_claim_id_accepts_prefix():
    claim = hash_content(b"doc")
    assert parse_claim_id(claim.hex()) == claim
    assert parse_claim_id(claim_id_hex(claim)) == claim
    assert parse_claim_id(claim_id_hex(claim).upper().replace("0X", "0x")) == claim


@pytest.mark.parametrize("text", ["abc", "zz" * 32, "0x" + "00" * 31])
def test_parse_claim_id_rejects_bad_input(text):
    with pytest.raises(ValueError):
        parse_claim_id(text)


def test_canonical_json_sorting():
    messy = {
        "z": 1,
        "a": "hello",
        "nested": {"b": 2, "a": 1},
    }
    canon = canonical_json(messy).decode("utf-8")
    assert canon == '{"a":"hello","nested":{"a":1,"b":2},"z":1}'
