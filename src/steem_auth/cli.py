"""
Command line tools for keys and signatures.

Examples:
    # Derive a key pair from a brain key
    steem-auth keygen "alice active password"

    # Public key and address of a WIF
    steem-auth pubkey 5J...
    steem-auth address STM...

    # Sign and verify a message
    steem-auth sign "hello" --wif 5J...
    steem-auth verify "hello" 1f... STM...

    # Same, on a testnet prefix
    steem-auth --prefix TST pubkey 5J...
"""

from __future__ import annotations

import logging

import click

from steem_auth import auth
from steem_auth.config import set_config
from steem_auth.ecc import Address, PublicKey
from steem_auth.types import SteemAuthError


@click.group()
@click.option(
    "--prefix",
    default=None,
    help="Address prefix for key and address strings (default: STEEM_ADDRESS_PREFIX or STM)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(prefix: str | None, verbose: bool) -> None:
    """Steem key, address and signature tools."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if prefix is not None:
        set_config(address_prefix=prefix)


@cli.command()
@click.argument("brain_key")
def keygen(brain_key: str) -> None:
    """Derive a WIF and public key from BRAIN_KEY."""
    wif = auth.get_private_key(brain_key)
    click.echo(f"private: {wif}")
    click.echo(f"public:  {auth.get_public_key(wif)}")


@cli.command()
@click.argument("wif")
def pubkey(wif: str) -> None:
    """Print the public key string of WIF."""
    try:
        click.echo(auth.get_public_key(wif))
    except SteemAuthError as e:
        raise click.ClickException(e.message) from e


@cli.command()
@click.argument("public_key")
def address(public_key: str) -> None:
    """Print the address derived from PUBLIC_KEY."""
    try:
        key = PublicKey.from_string_or_raise(public_key)
    except SteemAuthError as e:
        raise click.ClickException(e.message) from e
    click.echo(Address.from_public(key).to_string())


@cli.command()
@click.argument("message")
@click.option("--wif", required=True, help="Signing key in WIF")
def sign(message: str, wif: str) -> None:
    """Sign the SHA-256 of MESSAGE and print the hex signature."""
    try:
        click.echo(auth.sign_message(message, wif))
    except SteemAuthError as e:
        raise click.ClickException(e.message) from e


@cli.command()
@click.argument("message")
@click.argument("signature")
@click.argument("public_key")
def verify(message: str, signature: str, public_key: str) -> None:
    """Check SIGNATURE over MESSAGE against PUBLIC_KEY; exits 1 if invalid."""
    if not auth.verify_message(message, signature, public_key):
        raise click.ClickException("signature does not match")
    click.echo("valid")


if __name__ == "__main__":
    cli()
