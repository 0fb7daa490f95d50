import click

from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import build
from stockledger.infrastructure.cli.admin_commands import ledger_reconcile, user_set_role
from stockledger.infrastructure.cli.order_commands import (
    order_cancel,
    order_cancellable,
    order_create,
    order_deliver,
    order_invoice,
    order_show,
)
from stockledger.infrastructure.cli.options import fail
from stockledger.infrastructure.cli.stock_commands import (
    category_show,
    item_history,
    stock_in,
)
from stockledger.infrastructure.config import Settings
from stockledger.logging_config import configure_logging


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """stockledger: serialized inventory ledger"""
    try:
        settings = Settings.from_env()
        configure_logging(settings.log_level, settings.log_json)
        ctx.obj = build(settings)
    except DomainException as exc:
        raise fail(exc)


@cli.group()
def stock() -> None:
    """Receive units into stock."""


@cli.group()
def order() -> None:
    """Manage stock-out orders."""


@cli.group()
def item() -> None:
    """Inspect individual units."""


@cli.group()
def category() -> None:
    """Summarize inventory by equipment category."""


@cli.group()
def ledger() -> None:
    """Audit the transaction ledger."""


@cli.group()
def user() -> None:
    """Manage user roles."""


# Register subcommands
stock.add_command(stock_in)
order.add_command(order_cancel)
order.add_command(order_cancellable)
order.add_command(order_create)
order.add_command(order_deliver)
order.add_command(order_invoice)
order.add_command(order_show)
item.add_command(item_history)
category.add_command(category_show)
ledger.add_command(ledger_reconcile)
user.add_command(user_set_role)
