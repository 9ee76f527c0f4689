"""
Command-line interface for VC Proof Verifier.

Usage:
    vc-proof-verify credential.json
    vc-proof-verify https://example.com/credentials/123
    cat credential.json | vc-proof-verify -
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from vc_proof_verifier.credential import Credential
from vc_proof_verifier.document_loader import DocumentLoader, HttpDocumentLoader
from vc_proof_verifier.outcome import OutcomeStatus, VerificationOutcome
from vc_proof_verifier.resolver import HTTP_SCHEMES
from vc_proof_verifier.verifier import EmbeddedProofVerifier


console = Console()

EXIT_CODES = {
    OutcomeStatus.SUCCESS: 0,
    OutcomeStatus.REJECTED: 1,
    OutcomeStatus.FATAL: 2,
}


def format_outcome(outcome: VerificationOutcome, credential: Credential) -> None:
    """Format and print a verification outcome."""
    if outcome.is_success:
        status_icon = "[bold green]VALID[/]"
        panel_style = "green"
    elif outcome.is_rejected:
        status_icon = "[bold red]INVALID[/]"
        panel_style = "red"
    else:
        status_icon = "[bold yellow]ERROR[/]"
        panel_style = "yellow"

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Field", style="dim")
    table.add_column("Value")

    table.add_row("Status", status_icon)

    credential_id = credential.json.get("id")
    if isinstance(credential_id, str):
        table.add_row("Credential ID", credential_id)

    if credential.issuer:
        table.add_row("Issuer", credential.issuer)

    if outcome.verification_method:
        table.add_row("Verification Method", outcome.verification_method)

    if outcome.controller:
        table.add_row("Key Controller", outcome.controller)

    if outcome.check:
        table.add_row("Failed Check", outcome.check.value)

    if outcome.reason:
        table.add_row("Reason", f"[red]{escape(outcome.reason)}[/]")

    console.print(Panel(table, title="Embedded Proof", border_style=panel_style))


def load_credential(source: str, document_loader: DocumentLoader) -> Any:
    """Read the credential JSON from stdin, a URL or a file.

    URLs go through the same loader that resolves key documents, so
    ``--timeout``, ``--no-ssl-verify`` and ``--local-document`` apply to them.
    """
    if source == "-":
        return json.load(sys.stdin)

    if urlparse(source).scheme in HTTP_SCHEMES:
        data = document_loader.load(source)
        if data is None:
            raise click.ClickException(f"Credential not found at {source}")
        return data

    path = Path(source)
    if not path.is_file():
        raise click.ClickException(f"File not found: {source}")
    return json.loads(path.read_text())


def parse_local_documents(values: tuple[str, ...]) -> dict[str, Any]:
    """Parse ``URI=PATH`` pairs into pre-loaded documents."""
    documents: dict[str, Any] = {}
    for value in values:
        uri, sep, path = value.partition("=")
        if not sep or not uri or not path:
            raise click.BadParameter(
                f"Expected URI=PATH, got {value!r}", param_hint="--local-document"
            )
        with Path(path).open() as f:
            documents[uri] = json.load(f)
    return documents


@click.command()
@click.argument("source", required=True)
@click.option(
    "--local-document",
    "local_documents",
    multiple=True,
    metavar="URI=PATH",
    help="Serve the JSON file at PATH for URI instead of fetching it",
)
@click.option(
    "--no-ssl-verify",
    is_flag=True,
    help="Disable SSL certificate verification",
)
@click.option(
    "--json-output",
    is_flag=True,
    help="Output result as JSON",
)
@click.option(
    "--timeout",
    type=float,
    default=30.0,
    help="HTTP request timeout in seconds",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Log resolution steps to stderr",
)
@click.version_option(package_name="vc-proof-verifier")
def main(
    source: str,
    local_documents: tuple[str, ...],
    no_ssl_verify: bool,
    json_output: bool,
    timeout: float,
    verbose: bool,
) -> None:
    """Verify the embedded proof of a W3C Verifiable Credential.

    SOURCE can be:
    - A file path (e.g., credential.json)
    - A URL (e.g., https://example.com/credentials/123)
    - "-" to read from stdin

    Examples:

        vc-proof-verify credential.json

        vc-proof-verify --local-document https://example.com/key=key.json credential.json

        cat credential.json | vc-proof-verify -
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True))],
        )

    try:
        document_loader = HttpDocumentLoader(
            timeout=timeout,
            verify_ssl=not no_ssl_verify,
            local_documents=parse_local_documents(local_documents),
        )

        data = load_credential(source, document_loader)
        if not isinstance(data, dict):
            raise click.ClickException("Credential must be a JSON object")
        credential = Credential.from_dict(data)

        verifier = EmbeddedProofVerifier(document_loader=document_loader)

        outcome = verifier.run(credential)

        if json_output:
            console.print_json(data={**outcome.to_dict(), "issuer": credential.issuer})
        else:
            format_outcome(outcome, credential)

        sys.exit(EXIT_CODES[outcome.status])

    except json.JSONDecodeError as e:
        _report_error(f"Invalid JSON: {e}", json_output)

    except click.ClickException as e:
        _report_error(e.format_message(), json_output)

    except Exception as e:
        _report_error(str(e), json_output)


def _report_error(message: str, json_output: bool) -> None:
    if json_output:
        console.print_json(data={"error": message})
    else:
        console.print(f"[red]Error:[/] {escape(message)}")
    sys.exit(2)


if __name__ == "__main__":
    main()
