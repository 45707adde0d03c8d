#!/usr/bin/env python3
"""
Export Data Script

Dumps lessons, models, tutorials, prompts and users to one JSON file that
import_data.py can read back.

Usage:
    python scripts/export_data.py
    python scripts/export_data.py --output backups/import.json
"""

import sys
import argparse
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from rich.console import Console
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from config.settings import ConfigurationError, get_settings
from promptlab.errors import PromptLabError
from promptlab.graph.neo4j_client import Neo4jClient
from promptlab.pipeline import export_document, write_export

console = Console()


def main():
    parser = argparse.ArgumentParser(description="Export the PromptLab graph to JSON")
    parser.add_argument(
        "--output",
        default=None,
        help="Output file (default: from settings)"
    )
    args = parser.parse_args()

    settings = get_settings()
    output = args.output or settings.export_path

    try:
        settings.require_store_settings()
        client = Neo4jClient().connect()
    except (ConfigurationError, PromptLabError) as e:
        console.print(f"[red]Error: {e}[/]")
        sys.exit(1)

    try:
        document = export_document(client)
        path = write_export(document, output)
    except PromptLabError as e:
        console.print(f"[red]Export failed: {e.message}[/]")
        sys.exit(1)
    finally:
        client.close()

    for name, records in document.items():
        console.print(f"  {name}: [cyan]{len(records)}[/]")
    console.print(f"\n[bold green]Exported to {path}[/]\n")


if __name__ == "__main__":
    main()
