"""Flask CLI commands for Ledgerwise."""

from __future__ import annotations

import click


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    @app.cli.command("ledgerwise-init-db")
    def ledgerwise_init_db() -> None:
        """Create every database table."""

        from .extensions import EXTENSION_KEY
        from .infra.database import init_database

        init_database(app.extensions[EXTENSION_KEY]["engine"])
        click.echo("Database initialized.")

    @app.cli.command("ledgerwise-recompute")
    @click.option("--user-id", type=int, required=True, help="Owner of the balances to refold")
    def ledgerwise_recompute(user_id: int) -> None:
        """Refold asset and liability balances from the ledger."""

        from .extensions import get_services

        counts = get_services(app).net_worth.recompute_balances(user_id)
        click.echo(
            f"Recomputed {counts['assets']} asset(s) and {counts['liabilities']} liability(ies)."
        )
