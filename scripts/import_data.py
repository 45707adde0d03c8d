#!/usr/bin/env python3
"""
Import Data Script

Merges an export document back into the graph by id. Unlike the HTTP
import, prompts and users are included by default.

Usage:
    python scripts/import_data.py --input import.json
    python scripts/import_data.py --input import.json --collections lessons models
"""

import sys
import json
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
from promptlab.graph.schema import ENTITY_SCHEMAS
from promptlab.graph.neo4j_client import Neo4jClient
from promptlab.pipeline import import_document

console = Console()


def main():
    parser = argparse.ArgumentParser(description="Import an export document into the PromptLab graph")
    parser.add_argument(
        "--input",
        default=None,
        help="Export document to read (default: from settings)"
    )
    parser.add_argument(
        "--collections",
        nargs="+",
        choices=list(ENTITY_SCHEMAS),
        default=list(ENTITY_SCHEMAS),
        help="Collections to import (default: all)"
    )
    args = parser.parse_args()

    settings = get_settings()
    input_path = args.input or settings.export_path

    if not Path(input_path).exists():
        console.print(f"[red]Error: File not found: {input_path}[/]")
        sys.exit(1)

    with open(input_path, encoding="utf-8") as f:
        try:
            document = json.load(f)
        except ValueError as e:
            console.print(f"[red]Error: {input_path} is not valid JSON: {e}[/]")
            sys.exit(1)

    try:
        settings.require_store_settings()
        client = Neo4jClient().connect()
    except (ConfigurationError, PromptLabError) as e:
        console.print(f"[red]Error: {e}[/]")
        sys.exit(1)

    try:
        summary = import_document(client, document, args.collections)
    except PromptLabError as e:
        console.print(f"[red]Import failed: {e.message}[/]")
        sys.exit(1)
    finally:
        client.close()

    for name, count in summary.counts.items():
        console.print(f"  {name}: [cyan]{count}[/]")
    console.print("\n[bold green]Import complete![/]\n")


if __name__ == "__main__":
    main()
