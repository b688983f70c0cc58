"""Better Auth CLI - Main entry point."""

import asyncio
import json
import logging
from typing import Any

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .auth import AuthSession, SocialSignInOptions
from .config import ClientSettings
from .errors import BetterAuthError
from .models import AuthData
from .storage import FileSecureStore, SecureTokenStore, TokenStore

app = typer.Typer(
    name="better-auth",
    help="Better Auth client - sign in, inspect and clear the stored session",
    no_args_is_help=True,
)
console = Console()


def _settings(ctx: typer.Context) -> ClientSettings:
    resolved = ClientSettings()
    base_url = (ctx.obj or {}).get("base_url")
    if base_url:
        resolved = resolved.model_copy(update={"base_url": base_url})
    return resolved


def _build_session(config: ClientSettings) -> AuthSession:
    """Create a session using the file-backed token store."""
    return AuthSession(settings=config)


def _build_store(config: ClientSettings) -> TokenStore:
    return SecureTokenStore(FileSecureStore(config.storage_dir), key=config.storage_key)


def _mask(token: str) -> str:
    if len(token) <= 10:
        return "*" * len(token)
    return f"{token[:6]}...{token[-4:]}"


def _output_result(result: dict[str, Any]) -> None:
    console.print_json(json.dumps(result, default=str, indent=2))


def _print_auth(auth: AuthData | None, title: str) -> None:
    if auth is None:
        console.print(Panel("[yellow]No active session[/yellow]", title=title))
        return

    table = Table(title=title)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Token", _mask(auth.session.token))
    table.add_row("Expires", str(auth.session.expires_at) if auth.session.expires_at else "N/A")
    if auth.user:
        table.add_row("User ID", auth.user.id)
        table.add_row("Email", auth.user.email or "N/A")
        table.add_row("Name", auth.user.name or "N/A")
    console.print(table)


def _run(ctx: typer.Context, operation):
    """Run ``operation(session)`` and turn client errors into exit code 1."""

    async def _call():
        async with _build_session(_settings(ctx)) as session:
            return await operation(session)

    try:
        return asyncio.run(_call())
    except BetterAuthError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@app.callback()
def main(
    ctx: typer.Context,
    base_url: str = typer.Option(None, "--base-url", "-u", help="Backend root URL (default: BETTER_AUTH_BASE_URL)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests and token changes"),
):
    """Better Auth client."""
    ctx.obj = {"base_url": base_url}
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


# ============================================================================
# Session Commands
# ============================================================================


@app.command("session")
def session_cmd(ctx: typer.Context):
    """Fetch the current session from the backend."""
    auth = _run(ctx, lambda session: session.get_session())
    _print_auth(auth, "Current Session")


@app.command("sign-in")
def sign_in(
    ctx: typer.Context,
    provider: str = typer.Argument(..., help="Provider name (e.g. google, apple)"),
    id_token: str = typer.Option(..., "--id-token", "-t", help="Provider ID token"),
    nonce: str = typer.Option(None, "--nonce", help="Nonce used when the ID token was issued"),
    callback_url: str = typer.Option(None, "--callback-url", help="Callback URL passed to the backend"),
):
    """Exchange a provider ID token for a session."""
    options = SocialSignInOptions(callback_url=callback_url, nonce=nonce)
    auth = _run(ctx, lambda session: session.sign_in_with_id_token(provider, id_token, options))
    console.print(f"[green]Signed in with {provider}[/green]")
    _print_auth(auth, "Session")


@app.command("sign-out")
def sign_out(ctx: typer.Context):
    """Sign out on the server and delete the stored token."""
    _run(ctx, lambda session: session.sign_out())
    console.print("[green]Signed out[/green]")


@app.command("refresh")
def refresh(
    ctx: typer.Context,
    refresh_token: str = typer.Option(None, "--refresh-token", help="Refresh token, if the backend requires one"),
):
    """Refresh the session and store the new token."""
    auth = _run(ctx, lambda session: session.refresh(refresh_token))
    console.print("[green]Session refreshed[/green]")
    _print_auth(auth, "Session")


@app.command("refresh-token")
def refresh_provider_token(
    ctx: typer.Context,
    provider_id: str = typer.Argument(..., help="Provider ID (e.g. google)"),
    account_id: str = typer.Option(None, "--account-id", help="Linked account ID"),
    user_id: str = typer.Option(None, "--user-id", help="User ID"),
):
    """Refresh the provider's OAuth tokens."""
    tokens = _run(ctx, lambda session: session.refresh_token(provider_id, account_id, user_id))
    _output_result(tokens.model_dump(mode="json", by_alias=True, exclude_none=True))


# ============================================================================
# Local Token Commands
# ============================================================================


@app.command("token")
def token_status(ctx: typer.Context):
    """Show whether a session token is stored locally."""
    config = _settings(ctx)
    try:
        token = _build_store(config).retrieve()
    except BetterAuthError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Better Auth Token Status")
    table.add_column("Setting", style="cyan")
    table.add_column("Status", style="green")
    table.add_row("Backend", config.api_base)
    table.add_row("Session Token", _mask(token) if token else "[red]Not set[/red]")
    console.print(table)


@app.command("clear")
def clear(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
):
    """Delete the stored token without contacting the backend."""
    if not force:
        if not typer.confirm("Clear the stored session token?"):
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)

    try:
        _build_store(_settings(ctx)).delete()
    except BetterAuthError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    console.print("[green]Session token cleared[/green]")


if __name__ == "__main__":
    app()
