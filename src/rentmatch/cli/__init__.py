"""CLI entry points for RentMatch.

Provides command-line tools for:
- Normalizing identifiers
- Comparing names
- Fingerprinting identities
- Matching a search against candidate profiles
"""

import click

from .. import __version__
from ..logging import setup_logging
from .match import match
from .normalize import compare, fingerprint, normalize


@click.group()
@click.version_option(version=__version__, prog_name="rentmatch")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Emit structured logs to stderr",
)
def main(verbose: bool):
    """RentMatch - renter identity matching.

    Command-line tools for inspecting normalization, similarity
    and confidence scoring.
    """
    if verbose:
        setup_logging()


main.add_command(normalize, name="normalize")
main.add_command(compare, name="compare")
main.add_command(fingerprint, name="fingerprint")
main.add_command(match, name="match")


if __name__ == "__main__":
    main()
