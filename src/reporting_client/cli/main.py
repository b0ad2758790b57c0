import asyncio
import json
import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from reporting_client.bulk import Call, CallResult
from reporting_client.cli.callbacks import params_callback, parse_param_pairs
from reporting_client.config import ClientConfig
from reporting_client.exceptions import ReportingClientError
from reporting_client.transport import RawResponse, TransportClient
from reporting_client.utils.logging import setup_logging

app = typer.Typer(no_args_is_help=True)

UrlOption = Annotated[
    str | None,
    typer.Option(help="Base URL of the analytics instance, defaults to $MATOMO_URL"),
]
TokenOption = Annotated[
    str | None,
    typer.Option("--token", help="token_auth credential, defaults to $MATOMO_AUTH_TOKEN"),
]
SiteOption = Annotated[
    str | None,
    typer.Option("--site", help="Default idSite, defaults to $MATOMO_DEFAULT_SITE_ID"),
]
InsecureOption = Annotated[
    bool,
    typer.Option("--insecure", help="Send calls as GET query strings instead of POST bodies"),
]
TimeoutOption = Annotated[
    float | None,
    typer.Option(help="Request timeout in seconds"),
]


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Print debug logs to stderr")
    ] = False,
):
    """Query an analytics reporting API from the command line"""
    if verbose:
        setup_logging(level=logging.DEBUG)


def build_transport(
    *,
    url: str | None,
    token: str | None,
    site: str | None,
    insecure: bool,
    timeout: float | None,
) -> TransportClient:
    config = ClientConfig.from_env(
        url=url,
        token_auth=token,
        id_site=site,
        security_mode=False if insecure else None,
        timeout=timeout,
    )
    return TransportClient(config)


def _load_transport(**options) -> TransportClient:
    try:
        return build_transport(**options)
    except ValueError as error:
        typer.echo(f"Invalid configuration: {error}", err=True)
        raise typer.Exit(2)


def _render(value) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


@app.command(name="call")
def call_method(
    method: Annotated[str, typer.Argument(help="Remote method, e.g. VisitsSummary.get")],
    params: Annotated[
        list[str] | None,
        typer.Argument(help="Call parameters as key=value pairs", callback=params_callback),
    ] = None,
    url: UrlOption = None,
    token: TokenOption = None,
    site: SiteOption = None,
    insecure: InsecureOption = False,
    timeout: TimeoutOption = None,
):
    """Run one call and print its result"""
    transport = _load_transport(
        url=url, token=token, site=site, insecure=insecure, timeout=timeout
    )
    try:
        result = asyncio.run(transport.request(method, parse_param_pairs(params)))
    except ReportingClientError as error:
        typer.echo(str(error), err=True)
        raise typer.Exit(1)

    console = Console()
    if isinstance(result, RawResponse):
        console.print(result.text)
    elif isinstance(result, str):
        console.print(result)
    else:
        console.print_json(data=result)


@app.command(name="bulk")
def bulk_methods(
    methods: Annotated[list[str], typer.Argument(help="Remote methods sent in one bulk request")],
    param: Annotated[
        list[str] | None,
        typer.Option(
            "--param",
            "-p",
            help="key=value parameter applied to every call, may be repeated",
            callback=params_callback,
        ),
    ] = None,
    url: UrlOption = None,
    token: TokenOption = None,
    site: SiteOption = None,
    insecure: InsecureOption = False,
    timeout: TimeoutOption = None,
):
    """Run several calls in a single round trip and print a result table"""
    transport = _load_transport(
        url=url, token=token, site=site, insecure=insecure, timeout=timeout
    )
    shared_params = parse_param_pairs(param)
    calls = [Call(method=method, params=shared_params) for method in methods]
    try:
        results: list[CallResult] = asyncio.run(transport.bulk_request_results(calls))
    except ReportingClientError as error:
        typer.echo(str(error), err=True)
        raise typer.Exit(1)

    table = Table("Position", "Method", "Status", "Result", title="Bulk results")
    for result in results:
        if result.ok:
            table.add_row(
                str(result.position),
                result.method,
                "[green]ok[/green]",
                _render(result.value),
            )
        else:
            table.add_row(
                str(result.position),
                result.method,
                "[red]error[/red]",
                str(result.error),
            )
    console = Console()
    console.print(table)
    if not all(result.ok for result in results):
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
