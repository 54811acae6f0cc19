from __future__ import annotations

import typer

from preferred_pictures import PreferredPicturesError

from .. import console
from ..config import load_config
from ..http import ApiError, NetworkError, Transport, make_client


def _fail(e: Exception, code: int) -> None:
    console.err(str(e))
    raise typer.Exit(code=code)


def choose_url(
        choices: list[str] = typer.Argument(..., help="Choices to pick from, in order."),
        tournament: str = typer.Option(..., "--tournament", "-t", help="Tournament name."),
        ttl: int | None = typer.Option(None, "--ttl", help="Seconds after a choice during which actions count."),
        expiration_ttl: int | None = typer.Option(
            None, "--expiration-ttl", help="Seconds the signature stays valid (default 3600)."
        ),
        choices_prefix: str | None = typer.Option(None, "--choices-prefix", help="Prepended to every choice."),
        choices_suffix: str | None = typer.Option(None, "--choices-suffix", help="Appended to every choice."),
        destinations: list[str] | None = typer.Option(
            None, "--destination", "-d", help="Destination paired with the choice at the same position."
        ),
        destinations_prefix: str | None = typer.Option(None, "--destinations-prefix"),
        destinations_suffix: str | None = typer.Option(None, "--destinations-suffix"),
        json_output: bool = typer.Option(False, "--json", help="Ask for a JSON response instead of a redirect."),
        go: bool = typer.Option(False, "--go", help="Redirect to the destination of the previous choice."),
        uid: str | None = typer.Option(None, "--uid", help="Correlation id (default: random UUID)."),
        limited_signature: bool = typer.Option(
            False, "--limited-signature", help="Leave uid, expiration, json and go out of the signature."
        ),
        endpoint: str | None = typer.Option(None, "--endpoint", help="Override the configured endpoint."),
        fetch: bool = typer.Option(False, "--fetch", help="GET the URL and print the chosen location."),
):
    """
    Print a signed choose URL.
    """
    cfg = load_config()
    try:
        client = make_client(cfg, endpoint_override=endpoint)
        url = client.create_choose_url(
            choices=choices,
            tournament=tournament,
            ttl=ttl,
            expiration_ttl=expiration_ttl,
            choices_prefix=choices_prefix,
            choices_suffix=choices_suffix,
            destinations=destinations or None,
            destinations_prefix=destinations_prefix,
            destinations_suffix=destinations_suffix,
            json=json_output,
            go=go,
            uid=uid,
            limited_signature=limited_signature,
        )
    except PreferredPicturesError as e:
        _fail(e, 2)

    if not fetch:
        console.out(url)
        return

    try:
        with Transport(timeout_s=cfg.timeout_s) as transport:
            result = transport.fetch_choice(url)
    except (NetworkError, ApiError) as e:
        _fail(e, 1)

    if result.location:
        console.out(result.location)
    elif isinstance(result.data, str):
        console.out(result.data)
    else:
        console.print_json(result.data)


def report_action(
        url: str = typer.Argument(..., help="A choose URL previously used to make a choice."),
):
    """
    Record an action for the choice made with URL.
    """
    cfg = load_config()
    try:
        with Transport(timeout_s=cfg.timeout_s) as transport:
            status = transport.report_action(url)
    except (NetworkError, ApiError) as e:
        _fail(e, 1)
    console.ok(f"Action recorded ({status}).")
