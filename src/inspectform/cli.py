from __future__ import annotations

import logging

import typer

from inspectform.config import Settings

cli = typer.Typer(add_completion=False)


def run_server(host: str | None, port: int | None) -> None:
    import uvicorn

    from inspectform.app import create_app

    settings = Settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    resolved_host = host or settings.host
    resolved_port = port if port is not None else settings.port
    uvicorn.run(create_app(settings), host=resolved_host, port=resolved_port)


@cli.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    host: str | None = typer.Option(None, help="Address to bind"),
    port: int | None = typer.Option(None, help="Port to bind"),
) -> None:
    ctx.obj = {"host": host, "port": port}
    if ctx.invoked_subcommand is None:
        run_server(host, port)


@cli.command()
def run(
    ctx: typer.Context,
    host: str | None = typer.Option(None, help="Address to bind"),
    port: int | None = typer.Option(None, help="Port to bind"),
) -> None:
    base = ctx.obj or {}
    resolved_host = host or base.get("host")
    resolved_port = port if port is not None else base.get("port")
    run_server(resolved_host, resolved_port)


@cli.command()
def seed() -> None:
    """Create the predefined inspection forms in an empty store."""
    from inspectform.storage import init_storage, seed_default_forms

    settings = Settings()
    created = seed_default_forms(init_storage(settings, seed=False))
    typer.echo(f"{created} form(s) created")


if __name__ == "__main__":
    cli()
