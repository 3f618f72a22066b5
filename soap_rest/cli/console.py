"""Console commands for a configured SOAP service."""
import json
from pathlib import Path
from typing import Any, Dict, Optional

import click
from colorama import Fore, Style

from soap_rest.errors import SoapServiceError
from soap_rest.service import SoapService


def load_settings(path: Path) -> Dict[str, Any]:
    """Load service settings from a JSON file."""
    with open(path, "r") as f:
        return json.load(f)


class ServiceConsole:
    """Console interface over one SOAP service."""

    def __init__(self, service: SoapService):
        """Initialize console."""
        self.service = service

    def print_header(self, title: str):
        """Print a section header."""
        click.echo(f"\n{Fore.CYAN}{'━' * 45}")
        click.echo(f"{Fore.CYAN}{title}")
        click.echo(f"{Fore.CYAN}{'━' * 45}{Style.RESET_ALL}\n")

    def list_functions(self, refresh: bool = False):
        """List discovered operations."""
        self.print_header(f"Operations of {self.service.name}")

        functions = self.service.get_functions(refresh)
        if not functions:
            click.echo(f"{Fore.YELLOW}No operations discovered")
            return

        for function in functions.values():
            request = function.request_type or "-"
            response = function.response_type or "-"
            click.echo(f"{Fore.GREEN}{function.name:30s}{Style.RESET_ALL} {request} → {response}")

        click.echo(f"\n{Fore.GREEN}TOTAL: {len(functions)} operations")

    def list_types(self, refresh: bool = False):
        """List discovered types."""
        self.print_header(f"Types of {self.service.name}")

        types = self.service.get_types(refresh)
        for name, descriptor in types.items():
            if descriptor.is_struct:
                click.echo(f"{Fore.GREEN}📦 {name}")
                for field_name, field_type in descriptor.fields.items():
                    click.echo(f"    ├─ {field_name}: {field_type}")
            else:
                click.echo(f"{Fore.GREEN}•  {name}{Style.RESET_ALL}: {descriptor.declared_type}")

        dropped = self.service.builder.last_dropped
        if dropped:
            click.echo(f"\n{Fore.YELLOW}⚠️  {dropped} malformed declaration(s) dropped")

    def list_resources(self, refresh: bool = False):
        """Print accessible resources as JSON."""
        click.echo(json.dumps(self.service.get_resources(refresh), indent=2))

    def call(self, name: str, payload: Dict[str, Any]) -> bool:
        """Call an operation and print its result."""
        try:
            result = self.service.call_function(name, payload)
        except SoapServiceError as e:
            click.echo(f"{Fore.RED}❌ [{e.status_code}] {e}", err=True)
            return False

        click.echo(json.dumps(result, indent=2, default=str))
        return True

    def export_docs(self, output_file: Optional[Path] = None):
        """Write Swagger docs to a file, or print them."""
        doc = self.service.get_api_doc_info()
        text = json.dumps(doc, indent=2)

        if output_file is None:
            click.echo(text)
            return

        output_file.parent.mkdir(parents=True, exist_ok=True)
        with open(output_file, "w") as f:
            f.write(text)
        click.echo(f"{Fore.GREEN}✅ Docs written to {output_file}")
        click.echo(f"{Fore.GREEN}   Paths: {len(doc['paths'])}, definitions: {len(doc['definitions'])}")

    def refresh(self):
        """Drop cached schema tables and rebuild them."""
        self.service.refresh_table_cache()
        functions = self.service.get_functions()
        types = self.service.get_types()
        click.echo(f"{Fore.GREEN}✅ Schema refreshed: {len(functions)} operations, {len(types)} types")
