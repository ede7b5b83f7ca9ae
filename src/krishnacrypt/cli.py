"""Command-line interface for the KrishnaCrypt tunnel cipher."""

from __future__ import annotations

import json
import logging
import sys

import click

from . import __version__
from .cipher_core import decrypt_block, encrypt_block
from .cbc import validate_envelope_format
from .config import CipherConfig
from .identifiers import tunnel_id
from .kdf import key_schedule
from .selftest import run_self_test
from .trace import TraceRecorder, print_header
from .tunnel import tunnel_decrypt, tunnel_encrypt
from .utils import format_bytes_grid


def _load_config() -> CipherConfig:
    try:
        return CipherConfig.from_env()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _parse_block_hex(value: str, name: str) -> bytes:
    try:
        data = bytes.fromhex(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {name} hex: {e}", err=True)
        sys.exit(1)
    if len(data) != 16:
        click.echo(
            f"Error: {name} must be 32 hex chars (16 bytes), got {len(value)} chars",
            err=True,
        )
        sys.exit(1)
    return data


@click.group()
@click.version_option(version=__version__, prog_name="krishnacrypt")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Logging level (default: WARNING)",
)
def main(log_level: str) -> None:
    """KrishnaCrypt tunnel cipher.

    Encrypt and decrypt conversation messages keyed by a pair of
    participant identifiers.
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("message")
@click.option("--from", "-a", "id_a", required=True, help="Sender identifier")
@click.option("--to", "-b", "id_b", required=True, help="Recipient identifier")
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON")
def encrypt(message: str, id_a: str, id_b: str, as_json: bool) -> None:
    """Encrypt MESSAGE for the conversation between two participants."""
    result = tunnel_encrypt(message, id_a, id_b, _load_config())
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    elif result.success:
        click.echo(result.ciphertext)
    else:
        click.echo(f"Error: {result.message}", err=True)
    if not result.success:
        sys.exit(1)


@main.command()
@click.argument("ciphertext")
@click.option("--from", "-a", "id_a", required=True, help="Sender identifier")
@click.option("--to", "-b", "id_b", required=True, help="Recipient identifier")
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON")
def decrypt(ciphertext: str, id_a: str, id_b: str, as_json: bool) -> None:
    """Decrypt a base64 CIPHERTEXT produced by 'encrypt'."""
    result = tunnel_decrypt(ciphertext, id_a, id_b, _load_config())
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    elif result.success:
        click.echo(result.plaintext)
    else:
        click.echo(f"Error: {result.message}", err=True)
    if not result.success:
        sys.exit(1)


@main.command(name="room-id")
@click.argument("id_a")
@click.argument("id_b")
def room_id(id_a: str, id_b: str) -> None:
    """Print the tunnel/room identifier for a participant pair."""
    click.echo(tunnel_id(id_a, id_b))


@main.command()
@click.argument("ciphertext")
def validate(ciphertext: str) -> None:
    """Check that CIPHERTEXT is well-formed without decrypting it."""
    if validate_envelope_format(ciphertext):
        click.echo("valid")
    else:
        click.echo("invalid")
        sys.exit(1)


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
def selftest(as_json: bool) -> None:
    """Run the built-in encryption self-test."""
    report = run_self_test(config=_load_config())
    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        click.echo(f"Original:  {report.original}")
        click.echo(f"Encrypted: {report.encrypted}")
        click.echo(f"Decrypted: {report.decrypted}")
        click.echo(f"Room ID:   {report.room_id}")
        click.echo("")
        for name, passed in report.checks.items():
            click.echo(f"  {name:36s} {'PASS' if passed else 'FAIL'}")
        click.echo("")
        click.echo(report.message)
    if not report.success:
        sys.exit(1)


@main.command(name="trace-block")
@click.option("--key", "key_hex", required=True, help="16-byte key as 32 hex chars")
@click.option("--block", "block_hex", required=True, help="16-byte block as 32 hex chars")
@click.option("--decrypt", "inverse", is_flag=True, help="Trace decryption instead")
@click.option(
    "--trace",
    "trace_path",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Also write a JSON Lines trace to this file",
)
def trace_block(key_hex: str, block_hex: str, inverse: bool, trace_path: str | None) -> None:
    """Walk one block through every round, printing each state."""
    key = _parse_block_hex(key_hex, "Key")
    block = _parse_block_hex(block_hex, "Block")
    config = _load_config()
    schedule = key_schedule(key, config.rounds)

    print_header(f"{'Decrypt' if inverse else 'Encrypt'} block ({config.rounds} rounds)")
    click.echo("Input:")
    click.echo(format_bytes_grid(block))

    trace_file = open(trace_path, "w") if trace_path else None
    try:
        tracer = TraceRecorder(verbose=True, trace_file=trace_file)
        if inverse:
            output = decrypt_block(block, key, schedule, tracer)
        else:
            output = encrypt_block(block, key, schedule, tracer)
    finally:
        if trace_file:
            trace_file.close()

    click.echo("")
    click.echo(f"Output: {output.hex()}")


if __name__ == "__main__":
    main()
