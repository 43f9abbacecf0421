"""CLI for infixcalc.

Usage:
    python -m infixcalc eval "3 + 4 * 2"           # Print 11.0
    python -m infixcalc eval "10/3" --round 1      # Print 3.3
    python -m infixcalc tokens "(2)(3)"            # Token table
    python -m infixcalc serve                      # Listen on INFIXCALC_HOST:INFIXCALC_PORT
    python -m infixcalc client --port 5000         # Interactive session
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from infixcalc.client import CalcClient
from infixcalc.config import ServerConfig
from infixcalc.errors import EvaluationError, ProtocolError
from infixcalc.evaluator import evaluate
from infixcalc.formatting import describe_error, format_value
from infixcalc.models import TokenKind
from infixcalc.normalizer import normalize
from infixcalc.protocol import STOP
from infixcalc.server import CalcServer
from infixcalc.tokenizer import tokenize

app = typer.Typer(
    name="infixcalc",
    help="Infix arithmetic evaluator and expression server",
    no_args_is_help=True,
)
console = Console(stderr=True)


def _load_config(**overrides) -> ServerConfig:
    try:
        return ServerConfig.from_env().override(**overrides)
    except ValueError as e:
        console.print(f"[red]Invalid configuration:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command("eval")
def cmd_eval(
    expression: str = typer.Argument(help="Expression, e.g. '3 + 4 * 2'"),
    rounding: Optional[int] = typer.Option(None, "--round", "-r", min=0, help="Round the result to N decimal places"),
) -> None:
    """Evaluate an expression and print the result."""
    result = evaluate(expression)
    if not result.ok:
        console.print(f"[red]Error:[/red] {escape(describe_error(result.error))}")
        raise typer.Exit(1)
    typer.echo(format_value(result.value, rounding))


@app.command("tokens")
def cmd_tokens(
    expression: str = typer.Argument(help="Expression to tokenize"),
) -> None:
    """Show the canonical form and token sequence of an expression."""
    canonical = normalize(expression)
    try:
        tokens = tokenize(canonical)
    except EvaluationError as e:
        console.print(f"[red]Error:[/red] {escape(describe_error(e))}")
        raise typer.Exit(1)

    kind_styles = {
        TokenKind.NUMBER: "cyan",
        TokenKind.OPERATOR: "yellow",
        TokenKind.OPEN_PAREN: "dim",
        TokenKind.CLOSE_PAREN: "dim",
    }
    table = Table(title=f"Tokens: {escape(canonical)}", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Kind", min_width=12)
    table.add_column("Text", justify="right")
    for i, token in enumerate(tokens):
        style = kind_styles[token.kind]
        table.add_row(str(i), f"[{style}]{token.kind.value}[/{style}]", escape(token.text))

    console.print()
    console.print(table)
    console.print()


@app.command("serve")
def cmd_serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default: INFIXCALC_HOST or 127.0.0.1)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="TCP port (default: INFIXCALC_PORT or 5000)"),
    rounding: Optional[int] = typer.Option(None, "--round", "-r", min=0, help="Round responses to N decimal places"),
) -> None:
    """Run the expression server until interrupted."""
    config = _load_config(host=host, port=port, rounding_digits=rounding)
    try:
        server = CalcServer(config, console)
    except OSError as e:
        console.print(f"[red]Cannot listen on {config.host}:{config.port}:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    with server:
        console.print(f"Server started on [bold]{config.host}:{server.port}[/bold]")
        console.print("[dim]Waiting for clients... (Ctrl+C to stop)[/dim]")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            console.print("\n[yellow]Shutting down[/yellow]")


@app.command("client")
def cmd_client(
    host: Optional[str] = typer.Option(None, "--host", help="Server address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Server port"),
) -> None:
    """Send expressions to a running server interactively. '#' quits."""
    config = _load_config(host=host, port=port)
    client = CalcClient(config.host, config.port)
    try:
        client.connect()
    except OSError as e:
        console.print(f"[red]Cannot connect to {config.host}:{config.port}:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(f"[green]Connected[/green] to {config.host}:{config.port}")
    try:
        while True:
            try:
                line = console.input("Enter equation: ")
            except EOFError:
                break
            if line.strip() == STOP:
                break
            response = client.ask(line)
            console.print(f"Server response: {escape(response)}")
    except (ProtocolError, OSError) as e:
        console.print(f"[red]Connection lost:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    finally:
        client.close()


if __name__ == "__main__":
    app()
