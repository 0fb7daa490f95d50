"""Options shared by several command modules."""

from __future__ import annotations

import click

from stockledger.domain.exceptions import DomainException

actor_option = click.option(
    "--actor",
    "actor_id",
    required=True,
    envvar="STOCKLEDGER_ACTOR",
    help="User id performing the operation (or STOCKLEDGER_ACTOR).",
)


def fail(exc: DomainException) -> click.ClickException:
    """Wrap a domain error so the kind is visible to scripts."""
    return click.ClickException(f"[{exc.kind.value}] {exc}")
