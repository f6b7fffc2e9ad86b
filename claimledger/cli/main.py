# claimledger/cli/main.py
"""
CLI for operating a local claimledger runtime: endow accounts, move balances,
register and revoke content claims, and inspect or verify the resulting state.
"""

import os
import json
import logging
import sqlite3
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from claimledger.core.encoding import claim_id_hex, hash_content, parse_claim_id
from claimledger.core.types import ClaimId
from claimledger.runtime.dispatch import TOKEN_NAME, TOKEN_SYMBOL, Call, DispatchResult, Runtime
from claimledger.runtime.genesis import GenesisConfig
from claimledger.runtime.origin import Origin
from claimledger.storage import SQLiteStorage
from claimledger.verify.verifier import StateVerifier

app = typer.Typer(
    name="claimledger",
    help="Operate a local balance ledger and content claim registry",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()

FALSEY = {"0", "false", "no", "off"}


def get_db_path(db_flag: Optional[Path] = None) -> Path:
    """Resolve DB path in this order:
    1. --db flag
    2. CLAIMLEDGER_DB_PATH environment variable
    3. Default: ~/.claimledger/state.db
    """
    if db_flag:
        path = db_flag.resolve()
    else:
        env_path = os.environ.get("CLAIMLEDGER_DB_PATH")
        if env_path:
            path = Path(env_path).resolve()
        else:
            path = Path.home() / ".claimledger" / "state.db"

    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def mint_enabled(no_mint_flag: bool = False) -> bool:
    if no_mint_flag:
        return False
    return os.environ.get("CLAIMLEDGER_UNSAFE_MINT", "1").strip().lower() not in FALSEY


def configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def open_runtime(ctx: typer.Context, db: Optional[Path], must_exist: bool = True) -> Runtime:
    opts = ctx.obj or {}
    db_path = get_db_path(db or opts.get("db"))

    if must_exist and not db_path.exists():
        console.print(f"[red]Database file not found: {db_path}[/]")
        console.print("[yellow]To get started:[/]")
        console.print("  • Run: claimledger init --balance alice=100")
        console.print("  • Set env var: export CLAIMLEDGER_DB_PATH=/path/to/state.db")
        console.print("  • Or use --db: claimledger --db /custom/path.db accounts")
        raise typer.Exit(1)

    try:
        storage = SQLiteStorage(db_path)
    except (sqlite3.Error, OSError) as e:
        console.print(f"[red]Failed to open database: {str(e)}[/]")
        console.print("[yellow]The file may be corrupted or not a valid SQLite DB.[/]")
        raise typer.Exit(1)

    ctx.call_on_close(storage.close)
    return Runtime(storage, unsafe_mint=mint_enabled(opts.get("no_mint", False)))


def submit(runtime: Runtime, call: Call, origin: Origin) -> None:
    try:
        result = runtime.dispatch(call, origin)
    except (TypeError, ValueError) as e:
        console.print(f"[red]Invalid input: {e}[/]", soft_wrap=True)
        raise typer.Exit(1)
    report(result)


def report(result: DispatchResult) -> None:
    if result:
        console.print(f"[green]✓ {result.call} succeeded[/]")
        for record in result.events:
            data = json.dumps(record.event.to_dict(), separators=(",", ":"))
            console.print(f"  event #{record.index} {record.pallet}.{record.event.name} {data}", soft_wrap=True)
        return
    console.print(f"[red]✗ {result.call} failed: {result.error.module}.{result.error.name}[/]")
    console.print(f"  {result.error.message}", soft_wrap=True)
    raise typer.Exit(1)


def signed(who: str) -> Origin:
    try:
        return Origin.signed(who)
    except (TypeError, ValueError) as e:
        console.print(f"[red]Invalid signer: {e}[/]")
        raise typer.Exit(1)


def resolve_claim(claim_hash: Optional[str], file: Optional[Path]) -> ClaimId:
    if (claim_hash is None) == (file is None):
        console.print("[red]Pass exactly one of --hash or --file[/]")
        raise typer.Exit(1)
    if file is not None:
        if not file.is_file():
            console.print(f"[red]File not found: {file}[/]")
            raise typer.Exit(1)
        return hash_content(file.read_bytes())
    try:
        return parse_claim_id(claim_hash)
    except ValueError as e:
        console.print(f"[red]{e}[/]")
        raise typer.Exit(1)


@app.callback()
def main(
    ctx: typer.Context,
    db: Optional[Path] = typer.Option(
        None,
        "--db",
        help="Path to SQLite state database (overrides CLAIMLEDGER_DB_PATH env var)",
    ),
    no_mint: bool = typer.Option(
        False,
        "--no-mint",
        help="Disable the unsafe mint call (also: CLAIMLEDGER_UNSAFE_MINT=0)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log runtime activity to stderr"),
):
    """Manage balances and content claims in a local state database."""
    ctx.obj = {"db": db, "no_mint": no_mint}
    configure_logging(verbose)


@app.command()
def init(
    ctx: typer.Context,
    balance: Optional[List[str]] = typer.Option(None, "--balance", "-b", help="Genesis endowment as WHO=AMOUNT"),
    db: Optional[Path] = typer.Option(None, "--db", hidden=True),
):
    """Create a state database, write genesis balances and open block 1."""
    config = GenesisConfig()
    for entry in balance or []:
        who, sep, amount = entry.partition("=")
        if not sep or not amount.strip().isdecimal():
            console.print(f"[red]Invalid --balance '{entry}', expected WHO=AMOUNT[/]")
            raise typer.Exit(1)
        config.add_balance(who.strip(), int(amount))

    runtime = open_runtime(ctx, db, must_exist=False)
    try:
        config.build(runtime)
    except (TypeError, ValueError) as e:
        console.print(f"[red]Genesis failed: {e}[/]")
        raise typer.Exit(1)
    runtime.initialize_block(1)

    issuance = runtime.balances.total_issuance() or 0
    console.print(f"[green]Initialized {runtime.backend.db_path}[/]")
    console.print(f"  {len(config.balances)} accounts, issuance {issuance} {TOKEN_SYMBOL}, block 1")


@app.command()
def mint(
    ctx: typer.Context,
    dest: str = typer.Argument(..., help="Account to credit"),
    amount: int = typer.Argument(..., min=0, help="Amount to create"),
    signer: str = typer.Option(..., "--as", help="Signing account"),
    db: Optional[Path] = typer.Option(None, "--db", hidden=True),
):
    """Create new funds in DEST (any signed account may do this)."""
    runtime = open_runtime(ctx, db)
    submit(runtime, Call("Balances", "mint", {"dest": dest, "amount": amount}), signed(signer))


@app.command()
def transfer(
    ctx: typer.Context,
    dest: str = typer.Argument(..., help="Receiving account"),
    amount: int = typer.Argument(..., min=0, help="Amount to move"),
    signer: str = typer.Option(..., "--as", help="Sending account"),
    db: Optional[Path] = typer.Option(None, "--db", hidden=True),
):
    """Move AMOUNT from the signer to DEST."""
    runtime = open_runtime(ctx, db)
    submit(runtime, Call("Balances", "transfer", {"dest": dest, "amount": amount}), signed(signer))


@app.command()
def balance(
    ctx: typer.Context,
    who: str = typer.Argument(..., help="Account to look up"),
    db: Optional[Path] = typer.Option(None, "--db", hidden=True),
):
    """Show the balance of one account."""
    runtime = open_runtime(ctx, db)
    amount = runtime.balances.balance_of(who)
    if amount is None:
        console.print(f"[yellow]No account '{who}'[/]")
        raise typer.Exit(1)
    console.print(f"{who}: {amount} {TOKEN_SYMBOL}")


@app.command()
def accounts(
    ctx: typer.Context,
    db: Optional[Path] = typer.Option(None, "--db", hidden=True),
):
    """List all accounts with their balances and the total issuance."""
    runtime = open_runtime(ctx, db)
    rows = list(runtime.balances.accounts())
    if not rows:
        console.print("[yellow]No accounts found in database.[/]")
        return

    table = Table(title="Accounts")
    table.add_column("Account")
    table.add_column("Balance", justify="right")
    for who, amount in rows:
        table.add_row(who, str(amount))
    console.print(table)
    console.print(f"Total issuance: {runtime.balances.total_issuance() or 0} {TOKEN_SYMBOL}")


@app.command("create-claim")
def create_claim(
    ctx: typer.Context,
    signer: str = typer.Option(..., "--as", help="Registering account"),
    claim_hash: Optional[str] = typer.Option(None, "--hash", help="Claim id as 64 hex digits"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Claim the BLAKE2b-256 hash of this file"),
    db: Optional[Path] = typer.Option(None, "--db", hidden=True),
):
    """Register a content claim for the signer at the current block."""
    claim = resolve_claim(claim_hash, file)
    runtime = open_runtime(ctx, db)
    console.print(f"Claim id: {claim_id_hex(claim)}", soft_wrap=True)
    submit(runtime, Call("Claims", "create_claim", {"claim": claim}), signed(signer))


@app.command("revoke-claim")
def revoke_claim(
    ctx: typer.Context,
    signer: str = typer.Option(..., "--as", help="Owning account"),
    claim_hash: Optional[str] = typer.Option(None, "--hash", help="Claim id as 64 hex digits"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Revoke the claim on this file's hash"),
    db: Optional[Path] = typer.Option(None, "--db", hidden=True),
):
    """Revoke a claim the signer owns."""
    claim = resolve_claim(claim_hash, file)
    runtime = open_runtime(ctx, db)
    submit(runtime, Call("Claims", "revoke_claim", {"claim": claim}), signed(signer))


@app.command()
def claims(
    ctx: typer.Context,
    db: Optional[Path] = typer.Option(None, "--db", hidden=True),
):
    """List registered claims with owner and registration block."""
    runtime = open_runtime(ctx, db)
    rows = list(runtime.claims.all_claims())
    if not rows:
        console.print("[yellow]No claims registered.[/]")
        return

    for claim, record in rows:
        console.print(f"{claim_id_hex(claim)}  owner={record.owner}  block={record.height}", soft_wrap=True)


@app.command()
def events(
    ctx: typer.Context,
    db: Optional[Path] = typer.Option(None, "--db", hidden=True),
    pallet: Optional[str] = typer.Option(None, "--pallet", "-p", help="Only show events of this pallet"),
):
    """Show the events deposited in the current block."""
    runtime = open_runtime(ctx, db)
    records = runtime.system.read_events()
    if pallet:
        records = [r for r in records if r.pallet == pallet]
    if not records:
        console.print(f"[yellow]No events in block {runtime.system.block_number()}[/]")
        return

    for record in records:
        data = json.dumps(record.event.to_dict(), separators=(",", ":"))
        console.print(
            f"[bold cyan]{record.block:6d} | {record.index:3d} | {record.pallet}.{record.event.name}[/] {data}",
            soft_wrap=True,
        )


@app.command()
def advance(
    ctx: typer.Context,
    db: Optional[Path] = typer.Option(None, "--db", hidden=True),
):
    """Open the next block (clears the current block's events)."""
    runtime = open_runtime(ctx, db)
    number = runtime.next_block()
    console.print(f"[green]Now at block {number}[/]")


@app.command()
def verify(
    ctx: typer.Context,
    db: Optional[Path] = typer.Option(None, "--db", hidden=True),
):
    """Check state invariants (issuance conservation, balance range, claims)."""
    runtime = open_runtime(ctx, db)
    result = StateVerifier().verify(runtime)

    if result.is_valid:
        console.print("[green]✓ State is valid[/]")
        console.print(f"  {result.message}")
    else:
        console.print("[red]✗ State verification failed[/]")
        for failure in result.failures:
            console.print(f"  • [{failure.index}] {failure.category}: {failure.message}", soft_wrap=True)
        raise typer.Exit(1)


@app.command()
def info(
    ctx: typer.Context,
    db: Optional[Path] = typer.Option(None, "--db", hidden=True),
):
    """Show runtime version, token metadata and the current block."""
    runtime = open_runtime(ctx, db)
    version = runtime.version
    console.print(f"{version.spec_name} v{version.spec_version} (impl {version.impl_version})")
    console.print(f"Token: {TOKEN_NAME} ({TOKEN_SYMBOL})")
    console.print(f"Block: {runtime.system.block_number()}")
    console.print(f"Unsafe mint: {'enabled' if runtime.unsafe_mint else 'disabled'}")


if __name__ == "__main__":
    app()
