"""Command-line interface for SplitBasket."""

from __future__ import annotations

import json
from typing import Any, Optional

import typer

from splitbasket.config import get_settings
from splitbasket.db.repository import get_engine, session_scope
from splitbasket.engine import history, ledger, linking

app = typer.Typer(help="SplitBasket shared grocery ledger commands.")


def _echo_json(payload: Any, pretty: bool) -> None:
    if pretty:
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
    else:
        typer.echo(json.dumps(payload))


@app.command("init-db")
def init_db() -> None:
    """Create the database schema if it does not exist yet."""

    settings = get_settings()
    get_engine()
    typer.echo(f"Database ready at {settings.database_path}")


@app.command("ledger")
def ledger_command(
    pretty: bool = typer.Option(False, "--pretty", help="Pretty-print output JSON."),
) -> None:
    """Print who has paid what and who owes what."""

    with session_scope() as session:
        result = ledger.compute_ledger(session)
    if result is None:
        typer.secho("No members recorded yet.", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=1)
    _echo_json(result.model_dump(mode="json"), pretty)


@app.command("purchases")
def purchases_command(
    purchase_id: Optional[int] = typer.Argument(None, help="Show a single purchase."),
    pretty: bool = typer.Option(False, "--pretty", help="Pretty-print output JSON."),
) -> None:
    """Print purchase history."""

    with session_scope() as session:
        if purchase_id is None:
            payload: Any = [
                record.model_dump(mode="json") for record in history.list_purchase_history(session)
            ]
        else:
            record = history.find_purchase_history(session, purchase_id)
            if record is None:
                typer.secho(f"Purchase {purchase_id} not found.", fg=typer.colors.RED, err=True)
                raise typer.Exit(code=1)
            payload = record.model_dump(mode="json")
    _echo_json(payload, pretty)


@app.command("pending")
def pending_command(
    pretty: bool = typer.Option(False, "--pretty", help="Pretty-print output JSON."),
) -> None:
    """Print items still waiting to be bought."""

    with session_scope() as session:
        items = linking.list_pending_items(session)
    _echo_json([item.model_dump(mode="json") for item in items], pretty)


@app.command("serve")
def serve_command(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind."),
    port: int = typer.Option(8000, "--port", help="Port to listen on."),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes."),
) -> None:
    """Run the HTTP API."""

    from splitbasket.server.run import serve

    serve(host=host, port=port, reload_enabled=reload)


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the ``splitbasket`` script."""
    app(prog_name="splitbasket", args=argv)


if __name__ == "__main__":
    main()
