"""Chain adapter verification CLI."""

import argparse
import asyncio
import sys

from rich.console import Console
from rich.table import Table

from chain_tracker.chains import CHAIN_NAMES, Chain
from chain_tracker.chains.dto import ValidatorInfo
from chain_tracker.orchestration import State, UnsupportedChain
from chain_tracker.settings import Settings

console = Console()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Verify a chain adapter with real API calls")
    parser.add_argument(
        "chain",
        nargs="?",
        help="Chain name from the registry (for example: osmosis)",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List supported chain names and exit",
    )
    parser.add_argument(
        "--preview-limit",
        type=int,
        default=5,
        help="How many validators to show in preview table (default: 5)",
    )
    return parser


def _render_validator_preview(validators: list[ValidatorInfo], preview_limit: int) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Moniker", style="cyan")
    table.add_column("Operator", style="yellow")
    table.add_column("Tokens", style="green", justify="right")
    table.add_column("Commission", justify="right")
    table.add_column("Jailed")

    top = sorted(validators, key=lambda v: v.tokens, reverse=True)[:preview_limit]
    for validator in top:
        table.add_row(
            validator.moniker,
            validator.operator_address,
            f"{validator.tokens:,.2f}",
            f"{validator.commission_rate * 100:.2f}%",
            "yes" if validator.jailed else "no",
        )

    if len(validators) > preview_limit:
        table.add_row("...", "...", "...", "...", "...")

    console.print(table)


async def verify_chain(state: State, name: str, preview_limit: int) -> bool:
    console.print(f"\n[bold cyan]Verifying chain adapter: {name}[/bold cyan]\n")

    try:
        chain = state.get(name)
    except UnsupportedChain as exc:
        console.print(f"[bold red][FAIL][/bold red] {exc}")
        console.print(f"Supported chains: {', '.join(state.names)}")
        return False

    config = chain.config
    console.print("[bold]Step 1: Configuration[/bold]")
    console.print(f"  [green][OK][/green] REST: {config.rest_url}")
    console.print(f"  [green][OK][/green] RPC: {config.rpc_url}")
    console.print(f"  [green][OK][/green] WebSocket: {config.wss_url}")
    console.print(f"  [dim]JSON-RPC: {config.jsonrpc_url or 'disabled'}[/dim]")
    console.print(f"  [dim]Price feed key: {config.gecko or 'disabled'}[/dim]")

    console.print("\n[bold]Step 2: API - update_data()[/bold]")
    try:
        await chain.update_data()
    except Exception as exc:
        console.print(f"  [bold red][FAIL][/bold red] update_data() failed: {exc}")
        return False

    if isinstance(chain, Chain):
        data = chain.data
        console.print(f"  [green][OK][/green] {data.chain_id} at height {data.block_height}")
        console.print(f"  [dim]Block time: {data.block_time}[/dim]")
        console.print(f"  [dim]Bonded: {data.bonded_tokens} / supply: {data.total_supply}[/dim]")
        console.print(f"  [dim]Inflation: {data.inflation}[/dim]")
        if config.has_jsonrpc:
            console.print(f"  [dim]EVM height: {data.evm_block_height}[/dim]")

    console.print("\n[bold]Step 3: API - price feed[/bold]")
    if not config.price_eligible:
        console.print("  [yellow][WARN][/yellow] Chain does not participate in price tracking")
    else:
        report = await state.update_prices()
        if name in report.failed:
            console.print(f"  [bold red][FAIL][/bold red] update_price() failed: {report.failed[name]}")
            return False
        price = chain.price if isinstance(chain, Chain) else None
        if price is None:
            console.print("  [yellow][WARN][/yellow] No price returned by the price feed")
        else:
            console.print(f"  [green][OK][/green] Price: {price}")

    console.print("\n[bold]Step 4: API - validators (first page)[/bold]")
    if isinstance(chain, Chain):
        try:
            validators = await chain.fetch_validators(max_pages=1)
        except Exception as exc:
            console.print(f"  [bold red][FAIL][/bold red] validator query failed: {exc}")
            return False
        console.print(f"  [green][OK][/green] Retrieved {len(validators)} validators")
        if validators:
            _render_validator_preview(validators, preview_limit)
        else:
            console.print("  [yellow][WARN][/yellow] Validator query returned no records")

    console.print(f"\n[bold green][OK] All checks passed for {name}[/bold green]\n")
    return True


async def amain(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.list:
        console.print("Supported chains:")
        for name in CHAIN_NAMES:
            console.print(f"  - {name}")
        return 0

    if args.chain is None:
        parser.print_help()
        console.print("\nExample: verify-chain osmosis")
        return 1

    if args.preview_limit < 1:
        console.print("[bold red][FAIL][/bold red] --preview-limit must be >= 1")
        return 1

    async with State.new(Settings()) as state:
        success = await verify_chain(state, args.chain, args.preview_limit)
    return 0 if success else 1


def main() -> int:
    return asyncio.run(amain())


def entrypoint() -> None:
    sys.exit(main())
