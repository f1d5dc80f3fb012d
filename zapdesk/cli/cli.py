#!/usr/bin/env python

import asyncio
from functools import wraps
from typing import Optional

import click
from click import Context

from ..api.api_server import start_api_server
from ..controller import ResolutionController, select_address
from ..core.errors import ResolutionSuperseded, ZapdeskError
from ..core.logging import configure_logger
from ..core.settings import settings
from ..directory import ZendeskDirectory
from ..lnurl.address import parse_address
from ..lnurl.resolver import EndpointResolver
from ..qr import decode_data_url


class NaturalOrderGroup(click.Group):
    """For listing commands in help in order of definition"""

    def list_commands(self, ctx):
        return self.commands.keys()


# https://github.com/pallets/click/issues/85#issuecomment-503464628
def coro(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))

    return wrapper


def print_errors(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except ZapdeskError as e:
            raise click.ClickException(f"{e.detail} (code {e.code})")

    return wrapper


@click.group(cls=NaturalOrderGroup)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Verbose logging.",
)
@click.pass_context
def cli(ctx: Context, debug: bool):
    if debug:
        settings.debug = True
    configure_logger()
    ctx.ensure_object(dict)


@cli.command("invoice", help="Request an invoice from a lightning address.")
@click.argument("address", type=str)
@click.argument("amount", type=int)
@click.option("--comment", "-c", default=None, help="Comment for the payee.")
@click.option(
    "--png",
    "png_path",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Write the QR code to a PNG file.",
)
@click.option("--no-qr", is_flag=True, default=False, help="Do not print the QR code.")
@print_errors
@coro
async def invoice(
    address: str,
    amount: int,
    comment: Optional[str],
    png_path: Optional[str],
    no_qr: bool,
):
    async with ResolutionController() as controller:
        result = await controller.resolve_and_render(address, amount, comment=comment)
        if result is None:
            raise ResolutionSuperseded()
        if not no_qr:
            click.echo(controller.renderer.render_ascii(result.payment_request))
    click.echo(f"Pay {result.amount_sats} sats to {result.address}:\n")
    click.echo(result.payment_request)
    if png_path:
        with open(png_path, "wb") as f:
            f.write(decode_data_url(result.qr_code))
        click.echo(f"\nQR code written to {png_path}")


@cli.command("params", help="Show the payRequest behind a lightning address.")
@click.argument("address", type=str)
@print_errors
@coro
async def params(address: str):
    resolver = EndpointResolver()
    try:
        pay_params = await resolver.resolve(parse_address(address))
    finally:
        await resolver.aclose()
    click.echo(f"Callback: {pay_params.callback}")
    click.echo(f"Amount range: {pay_params.min_sats} - {pay_params.max_sats} sats")
    click.echo(f"Comment allowed: {pay_params.comment_allowed} characters")
    click.echo(f"Metadata hash: {pay_params.metadata_hash}")


@cli.command("agent", help="Look up the lightning address of a support agent.")
@click.argument("email", type=str)
@print_errors
@coro
async def agent(email: str):
    directory = ZendeskDirectory()
    try:
        profile = await directory.lookup(email)
    finally:
        await directory.aclose()
    if profile is None:
        click.echo(f"No agent found for {email}.")
        click.echo(f"Lightning address: {select_address(None)} (default)")
        return
    click.echo(f"Agent: {profile.name} <{profile.email}>")
    address = select_address(profile.lightning_address)
    suffix = "" if profile.lightning_address else " (default)"
    click.echo(f"Lightning address: {address}{suffix}")


@cli.command("tip-comment", help="Record a sent tip as a private ticket comment.")
@click.argument("ticket_id", type=int)
@click.argument("amount", type=int)
@click.option("--message", "-m", default=None, help="Message from the customer.")
@print_errors
@coro
async def tip_comment(ticket_id: int, amount: int, message: Optional[str]):
    directory = ZendeskDirectory()
    try:
        body = await directory.post_tip_comment(ticket_id, amount, message)
    finally:
        await directory.aclose()
    click.echo(f"Comment added to ticket {ticket_id}:\n")
    click.echo(body)


@cli.command("serve", help="Start the REST API.")
@click.option("--host", default=settings.api_host, help="Listen address.")
@click.option("--port", default=settings.api_port, type=int, help="Listen port.")
def serve(host: str, port: int):
    start_api_server(port=port, host=host)
