"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from stockledger.application.cancel_order import CancelOrderHandler
from stockledger.application.create_order import CreateOrderHandler
from stockledger.application.deliver_order import DeliverOrderHandler
from stockledger.application.dto import OrderDTO, OrderItemSpec
from stockledger.application.invoice_order import InvoiceOrderHandler
from stockledger.application.list_cancellable_orders import ListCancellableOrdersHandler
from stockledger.application.show_order import ShowOrderHandler
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import Components
from stockledger.infrastructure.cli.options import actor_option, fail


def _parse_items(raw: tuple[str, ...]) -> list[OrderItemSpec]:
    """Parse 'SN1' or 'SN1:Standard:12' values into OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for value in raw:
        parts = [p.strip() for p in value.split(":")]
        if len(parts) == 1:
            specs.append(OrderItemSpec(serial_number=parts[0]))
            continue
        if len(parts) != 3:
            raise click.BadParameter(
                f"Invalid item '{value}'. Expected 'Serial' or 'Serial:WarrantyType:Months'."
            )
        serial, warranty_type, months = parts
        try:
            period = int(months)
        except ValueError:
            raise click.BadParameter(
                f"Invalid warranty period '{months}' for serial '{serial}'."
            )
        specs.append(OrderItemSpec(serial, warranty_type, period))
    return specs


@click.command("create")
@actor_option
@click.option("--number", "order_number", required=True, help="Business order number.")
@click.option("--dealer", required=True, help="Dealer name.")
@click.option("--client", default="", help="End client (defaults to N/A).")
@click.option("--location", default="", help="Delivery location.")
@click.option(
    "--item",
    "items",
    multiple=True,
    required=True,
    help="Unit as 'Serial' or 'Serial:WarrantyType:Months'. Repeatable.",
)
@click.pass_obj
def order_create(
    app: Components,
    actor_id: str,
    order_number: str,
    dealer: str,
    client: str,
    location: str,
    items: tuple[str, ...],
) -> None:
    """Create a stock-out order (reserves every unit)."""
    specs = _parse_items(items)

    handler = CreateOrderHandler(
        order_repo=app.orders,
        inventory_repo=app.inventory,
        batch_writer=app.store,
        allocator=app.allocator,
    )

    try:
        result = handler.handle(
            actor_id=actor_id,
            order_number=order_number,
            dealer=dealer,
            client=client,
            location=location,
            items=specs,
        )
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Order #{result.order_id} ({result.order_number}) created")
    click.echo(f"Transactions: {', '.join(str(t) for t in result.transaction_ids)}")


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  {dto.order_number}  (status={dto.order_status})")
    click.echo(f"Dealer:   {dto.customer_dealer}")
    click.echo(f"Client:   {dto.customer_client}")
    click.echo(f"Invoice:  {dto.invoice_status}   Delivery: {dto.delivery_status}")
    click.echo(f"Created:  {dto.created_at}")
    if dto.cancellation_reason:
        click.echo(f"Cancelled: {dto.cancellation_reason}")
    if dto.cancellation_pending:
        click.echo("Cancellation in progress; run 'order cancel' again to finish it.")
    click.echo()

    click.echo(f"  {'Txn':>6} {'Serial':<20} {'Model':<20} {'Status':<10}")
    click.echo(f"  {'-'*59}")
    for line in dto.lines:
        if line.serial_number is None:
            click.echo(f"  {line.transaction_id:>6} {'(missing from ledger)':<20}")
            continue
        click.echo(
            f"  {line.transaction_id:>6} {line.serial_number:<20} "
            f"{line.model or '':<20} {line.status or '':<10}"
        )


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@click.pass_obj
def order_show(app: Components, order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=app.orders, transaction_repo=app.transactions)

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise fail(exc)

    _display_order(dto)


@click.command("invoice")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to invoice.")
@click.option("--invoice", "invoice_number", required=True, help="Invoice number.")
@click.pass_obj
def order_invoice(app: Components, order_id: int, invoice_number: str) -> None:
    """Record the invoice for a pending order."""
    handler = InvoiceOrderHandler(order_repo=app.orders, batch_writer=app.store)

    try:
        handler.handle(order_id, invoice_number)
    except DomainException as exc:
        raise fail(exc)

    click.echo(f"Order #{order_id} invoiced ({invoice_number.strip()}).")


@click.command("deliver")
@actor_option
@click.option("--id", "order_id", required=True, type=int, help="Order ID to deliver.")
@click.pass_obj
def order_deliver(app: Components, actor_id: str, order_id: int) -> None:
    """Record signed delivery of every unit on an order."""
    handler = DeliverOrderHandler(
        order_repo=app.orders,
        transaction_repo=app.transactions,
        inventory_repo=app.inventory,
        batch_writer=app.store,
        allocator=app.allocator,
    )

    try:
        result = handler.handle(actor_id=actor_id, order_id=order_id)
    except DomainException as exc:
        raise fail(exc)

    click.echo(
        f"Order #{result.order_id} delivered — "
        f"{len(result.delivery_transaction_ids)} unit(s)."
    )
    for missing in result.missing_transaction_ids:
        click.echo(f"Warning: transaction {missing} not found in ledger; skipped.")


@click.command("cancel")
@actor_option
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.option("--reason", default="", help="Why the order is cancelled.")
@click.pass_obj
def order_cancel(app: Components, actor_id: str, order_id: int, reason: str) -> None:
    """Cancel an order and return its units to stock (admin only)."""
    handler = CancelOrderHandler(
        order_repo=app.orders,
        transaction_repo=app.transactions,
        inventory_repo=app.inventory,
        batch_writer=app.store,
        allocator=app.allocator,
        authorizer=app.users,
    )

    try:
        result = handler.handle(order_id=order_id, actor_id=actor_id, reason=reason)
    except DomainException as exc:
        raise fail(exc)

    click.echo(
        f"Order #{result.order_id} ({result.order_number}) cancelled — "
        f"{result.cancelled_count} unit(s) returned to stock."
    )
    for missing in result.missing_transaction_ids:
        click.echo(f"Warning: transaction {missing} not found in ledger; skipped.")


@click.command("cancellable")
@actor_option
@click.pass_obj
def order_cancellable(app: Components, actor_id: str) -> None:
    """List orders that can still be cancelled (admin only)."""
    handler = ListCancellableOrdersHandler(
        order_repo=app.orders,
        transaction_repo=app.transactions,
        authorizer=app.users,
    )

    try:
        orders = handler.handle(actor_id)
    except DomainException as exc:
        raise fail(exc)

    if not orders:
        click.echo("No cancellable orders.")
        return

    click.echo(f"{'ID':>5} {'Order':<16} {'Dealer':<20} {'Status':<10} {'Units':>5}")
    click.echo("-" * 60)
    for dto in orders:
        click.echo(
            f"{dto.id:>5} {dto.order_number:<16} {dto.customer_dealer:<20} "
            f"{dto.order_status:<10} {len(dto.lines):>5}"
        )
