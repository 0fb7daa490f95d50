"""CLI commands for stock receipt and unit/category queries."""

from __future__ import annotations

import click

from stockledger.application.category_breakdown import CategoryBreakdownHandler
from stockledger.application.item_history import ItemHistoryHandler
from stockledger.application.stock_in import StockInHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import Components
from stockledger.infrastructure.cli.options import actor_option, fail


@click.command("in")
@actor_option
@click.option("--serial", "serial_number", required=True, help="Unit serial number.")
@click.option("--category", "equipment_category", required=True, help="Equipment category.")
@click.option("--model", required=True, help="Model name.")
@click.option("--size", default=None, help="Panel size, if known.")
@click.option("--batch", default="", help="Receiving batch.")
@click.option("--remarks", default="", help="Free-text remark.")
@click.pass_obj
def stock_in(
    app: Components,
    actor_id: str,
    serial_number: str,
    equipment_category: str,
    model: str,
    size: str | None,
    batch: str,
    remarks: str,
) -> None:
    """Receive one unit into stock."""
    handler = StockInHandler(
        inventory_repo=app.inventory,
        batch_writer=app.store,
        allocator=app.allocator,
    )

    try:
        result = handler.handle(
            actor_id=actor_id,
            serial_number=serial_number,
            equipment_category=equipment_category,
            model=model,
            size=size,
            batch=batch,
            remarks=remarks,
        )
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Unit {result.serial_number} received (transaction {result.transaction_id})")


@click.command("history")
@click.option("--serial", "serial_number", required=True, help="Unit serial number.")
@click.pass_obj
def item_history(app: Components, serial_number: str) -> None:
    """Show a unit's ledger history and status."""
    handler = ItemHistoryHandler(inventory_repo=app.inventory, transaction_repo=app.transactions)

    try:
        dto = handler.handle(serial_number)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Serial:    {dto.serial_number}")
    click.echo(f"Stored:    {dto.materialized_status or '(no inventory record)'}")
    click.echo(f"Resolved:  {dto.resolved_status}")
    click.echo(f"Effective: {dto.effective_status}")
    click.echo()
    click.echo(f"  {'Txn':>6} {'Date':<20} {'Type':<13} {'Status':<10} {'Ref':<10}")
    click.echo(f"  {'-'*62}")
    for txn in dto.transactions:
        ref = f"<- {txn.original_transaction_id}" if txn.original_transaction_id else ""
        click.echo(
            f"  {txn.transaction_id:>6} {txn.date:<20} {txn.type:<13} {txn.status:<10} {ref:<10}"
        )


@click.command("show")
@click.option("--name", "category_name", required=True, help="Equipment category.")
@click.pass_obj
def category_show(app: Components, category_name: str) -> None:
    """Show unit counts for one equipment category."""
    handler = CategoryBreakdownHandler(
        inventory_repo=app.inventory,
        size_tracked_categories=app.settings.size_tracked_categories,
    )

    try:
        breakdown = handler.handle(category_name)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Category: {breakdown.category_name}")
    click.echo(
        f"Total {breakdown.total_items}  Active {breakdown.active_items}  "
        f"Reserved {breakdown.reserved_items}  Delivered {breakdown.delivered_items}"
    )
    click.echo()
    click.echo(f"  {'Model':<30} {'Active':>6}")
    click.echo(f"  {'-'*37}")
    for entry in breakdown.models:
        click.echo(f"  {entry.model:<30} {entry.active_count:>6}")

    for size in breakdown.size_breakdown:
        click.echo()
        click.echo(f'  {size.size}"  ({size.total_active} active)')
        for entry in size.models:
            click.echo(f"    {entry.model:<28} {entry.active_count:>6}")
