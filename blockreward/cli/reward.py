#!/usr/bin/env python3
"""
Block Reward CLI

Command-line interface for inspecting block reward computations.

Usage:
    blockreward compute --config CONFIG --number N --gas-used GAS --rewardbase ADDR
                        [--base-fee FEE] [--staking SNAPSHOT] [--json]
    blockreward ratio <ratio> [--parts N]
"""

import json
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from ..config import load_config
from ..constants import REWARD_SLICE_COUNT
from ..exceptions import BlockRewardError
from ..reward import BlockHeader, StakingSnapshot, get_block_reward, parse_ratio


console = Console()


def load_staking_snapshot(path: str) -> StakingSnapshot:
    """Read a staking snapshot from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return StakingSnapshot.from_dict(json.load(f))


@click.group()
@click.version_option(package_name="blockreward")
def cli():
    """Deterministic block reward computation."""
    pass


@cli.command("compute")
@click.option("--config", "config_path", required=True, type=click.Path(exists=True, dir_okay=False),
              help="Chain config TOML file")
@click.option("--number", required=True, type=click.IntRange(min=0), help="Block number")
@click.option("--gas-used", required=True, type=click.IntRange(min=0), help="Gas used by the block")
@click.option("--rewardbase", required=True, help="Proposer reward address")
@click.option("--base-fee", type=click.IntRange(min=0), default=None, help="Block base fee (after Magma)")
@click.option("--staking", "staking_path", type=click.Path(exists=True, dir_okay=False), default=None,
              help="Staking snapshot JSON file")
@click.option("--json", "as_json", is_flag=True, help="Print the reward spec as JSON")
def compute_cmd(config_path: str, number: int, gas_used: int, rewardbase: str,
                base_fee: Optional[int], staking_path: Optional[str], as_json: bool):
    """Compute the reward paid in a block."""
    header = BlockHeader(number=number, gas_used=gas_used, rewardbase=rewardbase, base_fee=base_fee)
    try:
        config = load_config(config_path)
        staking_info = load_staking_snapshot(staking_path) if staking_path else None
        spec = get_block_reward(header, config, staking_info)
    except (BlockRewardError, ValueError) as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps(spec.to_dict(), indent=2))
        return

    summary = Table(title=f"Block {number} reward ({Path(config_path).name})")
    summary.add_column("Pool")
    summary.add_column("Amount", justify="right")
    for label, amount in (
        ("Minted", spec.minted),
        ("Fee", spec.fee),
        ("Burnt", spec.burnt),
        ("Proposer", spec.proposer),
        ("Stakers", spec.stakers),
        ("Treasury A", spec.treasury_a),
        ("Treasury B", spec.treasury_b),
    ):
        summary.add_row(label, str(amount))
    console.print(summary)

    recipients = Table(title="Recipients")
    recipients.add_column("Address")
    recipients.add_column("Amount", justify="right")
    for address, amount in sorted(spec.rewards.items()):
        recipients.add_row(address, str(amount))
    console.print(recipients)


@cli.command("ratio")
@click.argument("ratio")
@click.option("--parts", default=REWARD_SLICE_COUNT, show_default=True, type=click.IntRange(min=1),
              help="Expected number of terms")
def ratio_cmd(ratio: str, parts: int):
    """Validate a governance ratio string."""
    try:
        weights, total = parse_ratio(ratio, parts)
    except BlockRewardError as e:
        raise click.ClickException(str(e))
    click.echo(f"weights={weights} total={total}")


def main():
    cli()


if __name__ == "__main__":
    main()
