"""CLI command for matching a search against candidate profiles.

Usage:
    rentmatch match --input search.json --candidates candidates.json [--json]

The input file holds one search object; the candidates file holds a list
of profiles:

    {"name": "Juan Dela Cruz", "phone": "09171234567"}

    [{"renter_id": "A", "name": "Juan Dela Cruz", "phones": ["+639171234567"]}]
"""

import json
import sys
from pathlib import Path

import click
from pydantic import TypeAdapter, ValidationError

from ..config import get_settings
from ..matching.engine import MatchEngine
from ..matching.hints import GenericNameDetector
from ..matching.models import CandidateData, ConfidenceLevel, SearchInput
from ..matching.ranking import PolicyOptions
from ..matching.scoring import confidence_to_label

CONFIDENCE_COLORS = {
    ConfidenceLevel.EXACT: "green",
    ConfidenceLevel.HIGH: "green",
    ConfidenceLevel.MEDIUM: "yellow",
    ConfidenceLevel.LOW: "red",
}

_candidate_list = TypeAdapter(list[CandidateData])


@click.command(name="match")
@click.option(
    "--input",
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="JSON file with the search input",
)
@click.option(
    "--candidates",
    "candidates_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="JSON file with a list of candidate profiles",
)
@click.option(
    "--max-results",
    type=int,
    default=None,
    help="Maximum results to return (default from settings)",
)
@click.option(
    "--min-score",
    type=float,
    default=0.0,
    help="Drop results scoring below this",
)
@click.option(
    "--require-strong",
    is_flag=True,
    help="Only return results backed by an exact strong identifier",
)
@click.option(
    "--detect-generic/--no-detect-generic",
    default=True,
    help="Treat names common among the candidates as generic",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print results as JSON",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Show signals and penalties",
)
def match(
    input_file: Path,
    candidates_file: Path,
    max_results: int | None,
    min_score: float,
    require_strong: bool,
    detect_generic: bool,
    as_json: bool,
    verbose: bool,
):
    """Rank candidate profiles against a search.

    Examples:

        # Ranked table
        rentmatch match --input search.json --candidates profiles.json

        # Top three, machine readable
        rentmatch match --input search.json --candidates profiles.json \\
            --max-results 3 --json
    """
    try:
        search = SearchInput.model_validate_json(input_file.read_text(encoding="utf-8"))
        candidates = _candidate_list.validate_json(candidates_file.read_text(encoding="utf-8"))
        options = PolicyOptions(
            max_results=max_results,
            min_score=min_score,
            require_strong_match=require_strong,
        )
    except ValidationError as e:
        click.echo(f"Invalid input: {e}", err=True)
        sys.exit(1)

    hint = GenericNameDetector.from_candidates(candidates) if detect_generic else None
    engine = MatchEngine(get_settings().matching, generic_name_hint=hint)
    results = engine.search(search, candidates, options=options)

    if as_json:
        click.echo(
            json.dumps([result.model_dump(mode="json") for result in results], indent=2)
        )
        return

    if not results:
        click.echo("No matches found.")
        return

    click.echo(f"\nMatches Found: {len(results)}")
    click.echo("=" * 60)

    for i, result in enumerate(results, 1):
        click.echo(f"\n{i}. {result.renter_id}")
        click.echo("   Confidence: ", nl=False)
        click.secho(
            f"{confidence_to_label(result.confidence)} ({result.score:.2f})",
            fg=CONFIDENCE_COLORS.get(result.confidence, "white"),
        )

        if verbose:
            for signal in result.signals:
                click.echo(f"   + {signal.type.value} {signal.strength:.2f} {signal.description}")
            for penalty in result.penalties:
                click.echo(f"   - {penalty.reason.value} {penalty.amount:.2f} {penalty.description}")
