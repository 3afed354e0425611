"""
Operator-only script (NOT an API endpoint):
Seed a vocabulary CSV into Neo4j as Term and Definition nodes.

Expected CSV columns: term,definition,language (extra columns ignored).
Each row becomes

    (:Term {label, language})-[:LINK {label: "definition"}]->(:Definition {label})

Nodes and relationships are MERGEd, so re-running the same file is safe.
"""

import argparse
import csv
import os
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

# Add parent directory to path so we can import backend modules
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from neo4j import GraphDatabase  # type: ignore

from config import EXPAND_RELATIONSHIP_FILTER, NEO4J_DATABASE, NEO4J_URI, NEO4J_USERNAME
from languages import Language

DEFINITION_LINK_LABEL = "definition"


def _require_confirm() -> None:
    if os.getenv("SEED_CONFIRM", "") != "YES":
        raise SystemExit(
            "Refusing to run. Set SEED_CONFIRM=YES to confirm you want to modify the target Neo4j database."
        )


def _read_csv(path: Path) -> Iterable[Dict[str, str]]:
    with path.open("r", newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        yield from reader


def parse_vocabulary_rows(rows: Iterable[Dict[str, str]]) -> List[Tuple[str, str, str]]:
    """
    Returns (term, definition, database language name) triples.

    Rows with a blank term or definition are skipped. The language column accepts
    either the client-side or the database name of a supported language.

    Raises:
        ValueError: if a row names an unsupported language
    """
    triples = []
    for r in rows:
        term = (r.get("term") or "").strip()
        definition = (r.get("definition") or "").strip()
        if not term or not definition:
            continue
        language = (r.get("language") or "").strip()
        try:
            resolved = Language.of_client_value(language)
        except ValueError:
            resolved = Language.of_database_name(language)
        triples.append((term, definition, resolved.database_name))
    return triples


def _seed_vocabulary(tx, relationship_type: str, triples: Iterable[Tuple[str, str, str]]) -> None:
    # Relationship type cannot be parameterized in Cypher; validate + interpolate safely.
    if not relationship_type.replace("_", "").isalnum():
        raise ValueError(f"Invalid relationship type: {relationship_type}")
    for term, definition, language in triples:
        tx.run(
            f"""
            MERGE (t:Term {{label: $term, language: $language}})
            MERGE (d:Definition {{label: $definition}})
            MERGE (t)-[r:{relationship_type} {{label: $link_label}}]->(d)
            """,
            term=term,
            definition=definition,
            language=language,
            link_label=DEFINITION_LINK_LABEL,
        )


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed a vocabulary CSV into Neo4j.")
    parser.add_argument("csv_path")
    parser.add_argument("--neo4j-uri", default=NEO4J_URI)
    parser.add_argument("--neo4j-user", default=NEO4J_USERNAME)
    parser.add_argument("--neo4j-password", default=os.getenv("NEO4J_PASSWORD", ""))
    parser.add_argument("--database", default=NEO4J_DATABASE)
    parser.add_argument("--relationship-type", default=EXPAND_RELATIONSHIP_FILTER)
    args = parser.parse_args(list(argv) if argv is not None else None)

    if not args.neo4j_password:
        print("NEO4J_PASSWORD is required", file=sys.stderr)
        return 2

    _require_confirm()

    csv_path = Path(args.csv_path)
    if not csv_path.exists():
        print(f"Vocabulary CSV not found: {csv_path}", file=sys.stderr)
        return 2

    triples = parse_vocabulary_rows(_read_csv(csv_path))

    driver = GraphDatabase.driver(args.neo4j_uri, auth=(args.neo4j_user, args.neo4j_password))
    with driver:
        with driver.session(database=args.database) as session:
            session.execute_write(_seed_vocabulary, args.relationship_type, triples)

    print(f"Seeded {len(triples)} term/definition pairs into {args.database}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
