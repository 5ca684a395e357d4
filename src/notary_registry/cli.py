"""
notary-registry CLI

Thin verbs over the Repository facade, configured from NOTARY_* environment
variables:
- lookup: List signature digests linked to a manifest
- get: Fetch a signature payload
- put: Upload a signature payload
- link: Link an uploaded payload to a manifest
- sign: put + link in one step
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer

from .operations import run_and_exit
from .repository import Repository
from .settings import create_settings_from_env
from .storage.descriptor import Descriptor, validate_digest

app = typer.Typer(name="notary-registry", help="Store and link signatures in an OCI registry")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")
) -> None:
    """Store and link signatures in an OCI registry."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _open_repository() -> Repository:
    """Create the repository from environment settings."""
    return Repository.from_settings(create_settings_from_env())


def _parse_descriptor(raw: str, option: str) -> Descriptor:
    try:
        return Descriptor.model_validate_json(raw)
    except ValueError as e:
        raise ValueError(f"Invalid descriptor for {option}: {e}") from e


def _echo_descriptor(desc: Descriptor) -> None:
    typer.echo(json.dumps(desc.to_dict(), separators=(",", ":")))


@app.command()
def lookup(
    manifest_digest: str = typer.Argument(..., help="Digest of the signed manifest"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Per-request timeout in seconds"),
) -> None:
    """List signature payload digests linked to a manifest."""

    def _lookup() -> None:
        with _open_repository() as repo:
            for digest in repo.lookup(manifest_digest, timeout=timeout):
                typer.echo(digest)

    run_and_exit(_lookup)


@app.command()
def get(
    digest: str = typer.Argument(..., help="Digest of the signature payload"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to file instead of stdout"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Per-request timeout in seconds"),
) -> None:
    """Fetch a signature payload by digest."""

    def _get() -> None:
        with _open_repository() as repo:
            data = repo.get(digest, timeout=timeout)
        if output is None:
            typer.echo(data, nl=False)
        else:
            output.write_bytes(data)
            typer.echo(f"Wrote {len(data)} bytes to {output}", err=True)

    run_and_exit(_get)


@app.command()
def put(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Signature file"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Per-request timeout in seconds"),
) -> None:
    """Upload a signature payload and print its descriptor."""

    def _put() -> None:
        with _open_repository() as repo:
            desc = repo.put(path.read_bytes(), timeout=timeout)
        _echo_descriptor(desc)

    run_and_exit(_put)


@app.command()
def link(
    manifest: str = typer.Option(..., "--manifest", help="Manifest descriptor as JSON"),
    signature: str = typer.Option(..., "--signature", help="Signature descriptor as JSON (from put)"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Per-request timeout in seconds"),
) -> None:
    """Link an uploaded signature to a manifest and print the artifact descriptor."""

    def _link() -> None:
        manifest_desc = _parse_descriptor(manifest, "--manifest")
        signature_desc = _parse_descriptor(signature, "--signature")
        with _open_repository() as repo:
            desc = repo.link(manifest_desc, signature_desc, timeout=timeout)
        _echo_descriptor(desc)

    run_and_exit(_link)


@app.command()
def sign(
    manifest_digest: str = typer.Argument(..., help="Digest of the signed manifest"),
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Signature file"),
    manifest_media_type: Optional[str] = typer.Option(None, "--manifest-media-type", help="Media type of the signed manifest"),
    manifest_size: int = typer.Option(0, "--manifest-size", min=0, help="Size of the signed manifest in bytes"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Per-request timeout in seconds"),
) -> None:
    """Upload a signature and link it to a manifest."""

    def _sign() -> None:
        manifest_desc = Descriptor(
            media_type=manifest_media_type,
            digest=validate_digest(manifest_digest),
            size=manifest_size,
        )
        with _open_repository() as repo:
            signature_desc = repo.put(path.read_bytes(), timeout=timeout)
            desc = repo.link(manifest_desc, signature_desc, timeout=timeout)
        _echo_descriptor(desc)

    run_and_exit(_sign)


if __name__ == "__main__":
    app()
