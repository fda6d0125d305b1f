from pathlib import Path

import click

from stockroom.services import metrics
from stockroom.services.inventory_store import get_store
from stockroom.utils.csv_export import inventory_csv
from stockroom.utils.formatting import format_currency


def register_cli(app):
    @app.cli.command("low-stock")
    def low_stock() -> None:
        """List items at or below their low stock threshold."""
        items = metrics.low_stock_items(get_store().items)
        if not items:
            click.echo("No items are low on stock.")
            return
        for item in items:
            click.echo(
                f"{item.sku or '-'}\t{item.name}\t{item.current_stock} on hand "
                f"(threshold {item.low_stock_threshold})"
            )

    @app.cli.command("export-inventory")
    @click.option(
        "--output",
        "-o",
        type=click.Path(dir_okay=False, writable=True, path_type=Path),
        default=None,
        help="Write the CSV to this file instead of stdout.",
    )
    def export_inventory(output) -> None:
        """Export all items as CSV."""
        content = inventory_csv(get_store().items)
        if output is None:
            click.echo(content, nl=False)
            return
        output.write_text(content, encoding="utf-8", newline="")
        click.echo(f"Exported inventory to {output}")

    @app.cli.command("inventory-summary")
    def inventory_summary() -> None:
        """Print the dashboard totals."""
        store = get_store()
        revenue = metrics.total_revenue(store.transactions)
        expenditure = metrics.total_expenditure(store.transactions)
        click.echo(f"Items: {len(store.items)}")
        click.echo(f"Inventory value: {format_currency(metrics.inventory_value(store.items))}")
        click.echo(f"Revenue: {format_currency(revenue)}")
        click.echo(f"Expenditure: {format_currency(expenditure)}")
        click.echo(f"Profit: {format_currency(metrics.profit(revenue, expenditure))}")
