# examples/ledger_demo.py
# Run with: python examples/ledger_demo.py
#
# Walks through a mint → transfer → claim lifecycle on an in-memory runtime
# and prints each dispatch result.

from claimledger import (
    Call,
    GenesisConfig,
    MemoryStorage,
    Origin,
    Runtime,
    StateVerifier,
    hash_content,
)


def show(result) -> None:
    print(f"  {result}")
    for record in result.events:
        print(f"    event #{record.index}: {record.pallet}.{record.event.name} {record.event.to_dict()}")


if __name__ == "__main__":
    runtime = Runtime(MemoryStorage())
    GenesisConfig().add_balance("alice", 100).build(runtime)
    runtime.initialize_block(1)

    alice, bob, carol = Origin.signed("alice"), Origin.signed("bob"), Origin.signed("carol")

    print("Ledger")
    show(runtime.dispatch(Call("Balances", "transfer", {"dest": "bob", "amount": 50}), alice))
    show(runtime.dispatch(Call("Balances", "transfer", {"dest": "alice", "amount": 51}), bob))
    show(runtime.dispatch(Call("Balances", "transfer", {"dest": "alice", "amount": 1}), carol))
    show(runtime.dispatch(Call("Balances", "mint", {"dest": "carol", "amount": 25}), carol))
    for who, amount in runtime.balances.accounts():
        print(f"    {who:8} {amount}")
    print(f"    issuance {runtime.balances.total_issuance()}")

    runtime.next_block()
    doc = hash_content(b"my research notes")

    print("Claims")
    show(runtime.dispatch(Call("Claims", "create_claim", {"claim": doc}), alice))
    show(runtime.dispatch(Call("Claims", "revoke_claim", {"claim": doc}), bob))
    show(runtime.dispatch(Call("Claims", "revoke_claim", {"claim": doc}), alice))
    show(runtime.dispatch(Call("Claims", "revoke_claim", {"claim": doc}), alice))

    print()
    print(StateVerifier().verify(runtime))
