"""CLI commands for normalization, name comparison and fingerprints.

Usage:
    rentmatch normalize KIND VALUE [--strict]
    rentmatch compare NAME_A NAME_B
    rentmatch fingerprint --name NAME [--phone PHONE] [--email EMAIL]
"""

import sys

import click

from ..config import get_settings
from ..matching.models import IdentifierKind, SearchInput, TextField
from ..matching.normalizers import NormalizationError, Normalizer, normalize_name
from ..matching.similarity import (
    jaro_similarity,
    jaro_winkler_similarity,
    levenshtein_distance,
    levenshtein_similarity,
    name_similarity,
    name_sounds_like,
    soundex,
    token_set_similarity,
    token_sort_similarity,
)

KIND_CHOICES = [kind.value.lower() for kind in (*IdentifierKind, *TextField)]


@click.command(name="normalize")
@click.argument("kind", type=click.Choice(KIND_CHOICES, case_sensitive=False))
@click.argument("value")
@click.option(
    "--strict",
    is_flag=True,
    help="Use the de-duplication form of an email (drops +tags and Gmail dots)",
)
def normalize(kind: str, value: str, strict: bool):
    """Print the canonical form of VALUE.

    Examples:

        # Philippine mobile number
        rentmatch normalize phone "0917-123-4567"

        # Facebook profile URL
        rentmatch normalize facebook "https://m.facebook.com/juan.delacruz?ref=x"
    """
    normalizer = Normalizer.from_config(get_settings().matching)

    if strict and kind.upper() != IdentifierKind.EMAIL.value:
        click.echo("--strict only applies to emails", err=True)
        sys.exit(1)

    try:
        if strict:
            result = normalizer.normalize_email_strict(value)
        else:
            result = normalizer.normalize(kind, value)
    except NormalizationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(result)


@click.command(name="compare")
@click.argument("name_a")
@click.argument("name_b")
def compare(name_a: str, name_b: str):
    """Show every similarity measure for two names.

    Names are normalized first, exactly as the scorer does.
    """
    try:
        a = normalize_name(name_a)
        b = normalize_name(name_b)
    except NormalizationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    threshold = get_settings().matching.name_similarity_threshold
    combined = name_similarity(a, b)

    click.echo(f"\n'{a}' vs '{b}'")
    click.echo("=" * 50)
    click.echo(f"  Levenshtein distance:   {levenshtein_distance(a, b)}")
    click.echo(f"  Levenshtein similarity: {levenshtein_similarity(a, b):.3f}")
    click.echo(f"  Jaro:                   {jaro_similarity(a, b):.3f}")
    click.echo(f"  Jaro-Winkler:           {jaro_winkler_similarity(a, b):.3f}")
    click.echo(f"  Token set:              {token_set_similarity(a, b):.3f}")
    click.echo(f"  Token sort:             {token_sort_similarity(a, b):.3f}")
    click.echo(f"  Soundex:                {soundex(a) or '-'} / {soundex(b) or '-'}")
    click.echo(f"  Sounds alike:           {'yes' if name_sounds_like(a, b) else 'no'}")
    click.echo("  Name similarity:        ", nl=False)
    click.secho(f"{combined:.3f}", fg="green" if combined >= threshold else "yellow")


@click.command(name="fingerprint")
@click.option("--name", type=str, default=None, help="Full name")
@click.option("--phone", type=str, default=None, help="Phone number")
@click.option("--email", type=str, default=None, help="Email address")
@click.option("--facebook", type=str, default=None, help="Facebook profile URL or username")
@click.option("--govt-id", type=str, default=None, help="Government id number")
def fingerprint(
    name: str | None,
    phone: str | None,
    email: str | None,
    facebook: str | None,
    govt_id: str | None,
):
    """Print the profile fingerprint for an identity.

    The strongest identifier given (government id, phone, email, then
    Facebook) is combined with the name.
    """
    normalizer = Normalizer.from_config(get_settings().matching)
    search = SearchInput(
        name=name,
        phone=phone,
        email=email,
        facebook=facebook,
        govt_id=govt_id,
    )

    try:
        click.echo(normalizer.fingerprint_search(search))
    except NormalizationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
