#!/usr/bin/env python3
"""
Seed Database Script

Resets the PromptLab graph and loads the fixture models, lessons and
tutorials, then links them.

Usage:
    # Seed from the default fixtures file
    python scripts/seed_db.py

    # Seed from another file
    python scripts/seed_db.py --fixtures data/fixtures.json
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
from promptlab.pipeline import load_fixtures, seed_database, troubleshooting_hint

console = Console()


def main():
    parser = argparse.ArgumentParser(description="Seed the PromptLab graph")
    parser.add_argument(
        "--fixtures",
        default=None,
        help="Path to fixtures JSON (default: from settings)"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Hide the progress display"
    )

    args = parser.parse_args()

    settings = get_settings()
    fixtures_path = args.fixtures or settings.fixtures_path

    console.print(f"\n[bold]PromptLab - Database Seeder[/bold]")
    console.print(f"Fixtures: [cyan]{fixtures_path}[/]")

    try:
        settings.require_store_settings()
    except ConfigurationError as e:
        console.print(f"\n[red]Error: {e}[/]")
        sys.exit(1)

    if not Path(fixtures_path).exists():
        console.print(f"\n[red]Error: Fixtures file not found: {fixtures_path}[/]")
        sys.exit(1)

    try:
        fixtures = load_fixtures(fixtures_path)
    except PromptLabError as e:
        console.print(f"\n[red]Error: {e.message}[/]")
        sys.exit(1)

    client = Neo4jClient()

    try:
        report = seed_database(client, fixtures, show_progress=not args.quiet)
    except PromptLabError as e:
        console.print(f"\n[red]Seeding failed: {e.message}[/]")
        console.print(f"[yellow]{troubleshooting_hint(e)}[/]")
        sys.exit(1)
    else:
        if report.skipped_relationships:
            console.print(f"\n[yellow]Skipped {len(report.skipped_relationships)} relationships:[/]")
            for edge in report.skipped_relationships:
                console.print(f"  - {edge}")

        stats = client.get_stats()
        console.print(f"\n[bold]Graph Statistics:[/]")
        console.print(f"  Nodes: {stats['total_nodes']}")
        console.print(f"  Edges: {stats['total_edges']}")
        for label, count in sorted(stats["nodes_by_label"].items()):
            console.print(f"    {label}: {count}")
    finally:
        client.close()

    console.print("\n[bold green]Database seeding complete![/]\n")


if __name__ == "__main__":
    main()
