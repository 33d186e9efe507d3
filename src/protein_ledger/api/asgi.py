"""ASGI entrypoint for the protein ledger API."""

from protein_ledger.api.app import create_app
from protein_ledger.containers import build_container

app = create_app(build_container())
