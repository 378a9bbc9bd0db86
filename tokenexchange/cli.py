"""Command line interface for running token exchanges."""

from __future__ import annotations

import json
from typing import Optional

import typer

from tokenexchange import (
    ProviderConfiguration,
    TokenExchangeExecutor,
    TokenRequest,
    load_config,
)
from tokenexchange.auth import client_authentication_for
from tokenexchange.transports import get_connection_builder

app = typer.Typer(help="CLI for OAuth 2.0 token endpoint exchanges")


@app.callback()
def main() -> None:
    """tokenexchange CLI entry point."""
    pass


@app.command("exchange")
def exchange(
    token_endpoint: str,
    client_id: str = typer.Option(..., help="OAuth client identifier"),
    code: Optional[str] = typer.Option(None, help="Authorization code to redeem"),
    redirect_uri: Optional[str] = typer.Option(None, help="Redirect URI used for the code"),
    code_verifier: Optional[str] = typer.Option(None, help="PKCE code verifier"),
    refresh_token: Optional[str] = typer.Option(None, help="Refresh token to redeem"),
    scope: Optional[str] = typer.Option(None, help="Space separated scopes"),
    grant_type: Optional[str] = typer.Option(None, help="Grant type, inferred when omitted"),
    issuer: Optional[str] = typer.Option(None, help="Expected ID Token issuer"),
    nonce: Optional[str] = typer.Option(None, help="Expected ID Token nonce"),
    client_secret: Optional[str] = typer.Option(
        None, envvar="TOKENEXCHANGE_CLIENT_SECRET", help="Client secret"
    ),
    auth: str = typer.Option("none", help="Client authentication: none, basic or post"),
    config: Optional[str] = typer.Option(None, help="Path to a YAML config file"),
) -> None:
    """
    Exchange a grant for tokens and print the result as JSON.

    Exits with 0 on success, 1 when the exchange fails and 2 when the
    request itself is invalid.

    Example:
        tokenexchange exchange https://idp.example.com/token --client-id app --code abc --redirect-uri https://app/cb
        tokenexchange exchange https://idp.example.com/token --client-id app --refresh-token r1 --auth basic
    """
    try:
        request = TokenRequest(
            configuration=ProviderConfiguration(token_endpoint=token_endpoint, issuer=issuer),
            client_id=client_id,
            grant_type=grant_type,
            authorization_code=code,
            redirect_uri=redirect_uri,
            code_verifier=code_verifier,
            refresh_token=refresh_token,
            scope=scope,
            nonce=nonce,
        )
        client_auth = client_authentication_for(auth, client_secret)
    except ValueError as exc:
        typer.echo(f"Invalid token request: {exc}")
        raise typer.Exit(code=2)

    exchange_config = load_config(config)
    executor = TokenExchangeExecutor(
        connection_builder=get_connection_builder(exchange_config),
        config=exchange_config,
    )
    result = executor.execute(request, client_auth)

    if result.failure is not None:
        typer.echo(json.dumps({"failure": result.failure.to_dict()}, indent=2))
        raise typer.Exit(code=1)

    response = result.response.model_dump(mode="json", exclude={"request"})
    typer.echo(json.dumps({"response": response}, indent=2))


if __name__ == "__main__":  # pragma: no cover
    app()
