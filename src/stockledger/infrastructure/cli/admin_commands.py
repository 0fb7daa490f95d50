"""CLI commands for ledger audit and user administration."""

from __future__ import annotations

import click

from stockledger.application.assign_role import AssignRoleHandler
from stockledger.application.reconcile_inventory import ReconcileInventoryHandler
from stockledger.domain.exceptions import DomainException
from stockledger.domain.repository.user_directory import ROLES
from stockledger.infrastructure.bootstrap import Components
from stockledger.infrastructure.cli.options import actor_option, fail


@click.command("reconcile")
@click.option("--repair", is_flag=True, default=False, help="Write derived statuses back.")
@click.option("--actor", "actor_id", envvar="STOCKLEDGER_ACTOR", default=None,
              help="Admin user id; required with --repair.")
@click.pass_obj
def ledger_reconcile(app: Components, repair: bool, actor_id: str | None) -> None:
    """Compare stored unit status with the status derived from the ledger."""
    handler = ReconcileInventoryHandler(
        inventory_repo=app.inventory,
        transaction_repo=app.transactions,
        batch_writer=app.store,
        authorizer=app.users,
    )

    try:
        report = handler.handle(actor_id=actor_id, repair=repair)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Checked {report.items_checked} unit(s).")
    if report.is_consistent:
        click.echo("Inventory status matches the ledger.")
        return

    click.echo(f"  {'Serial':<20} {'Stored':<10} {'Ledger':<10}")
    click.echo(f"  {'-'*42}")
    for mismatch in report.mismatches:
        click.echo(
            f"  {mismatch.serial_number:<20} {mismatch.materialized_status:<10} "
            f"{mismatch.resolved_status:<10}"
        )
    if repair:
        click.echo(f"Repaired {report.repaired} unit(s).")
    else:
        click.echo(f"{len(report.mismatches)} mismatch(es); rerun with --repair to fix.")


@click.command("set-role")
@actor_option
@click.option("--uid", "user_id", required=True, help="User id.")
@click.option("--role", required=True, type=click.Choice(list(ROLES)), help="Role to assign.")
@click.pass_obj
def user_set_role(app: Components, actor_id: str, user_id: str, role: str) -> None:
    """Assign a role to a user (admin only once an admin exists)."""
    try:
        AssignRoleHandler(app.users).handle(actor_id, user_id, role)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"User {user_id} is now {role}.")
