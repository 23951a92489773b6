"""
Main CLI entry point for icon-minifier.
"""

import sys

import click

from icon_minifier import __version__
from icon_minifier.config.options import AmbiguousVariantPolicy


def parse_codepoint(ctx, param, value):
    """Accept codepoints as hex (0xE000, E000) or decimal."""
    if value is None:
        return None
    try:
        if value.lower().startswith(("0x", "u+")):
            return int(value[2:], 16)
        if value.isdigit():
            return int(value)
        return int(value, 16)
    except ValueError:
        raise click.BadParameter(f"not a codepoint: {value}")


def split_exts(ctx, param, value):
    if value is None:
        return None
    return [ext.strip().lstrip(".") for ext in value.split(",") if ext.strip()]


@click.group()
@click.version_option(version=__version__)
def cli():
    """Icon webfont minifier."""
    pass


@cli.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option(
    "-e",
    "--exts",
    callback=split_exts,
    default=None,
    help="Comma-separated file extensions to crawl (default: html).",
)
@click.option(
    "--cache/--no-cache",
    default=True,
    help="Cache downloaded stylesheets and fonts.",
)
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Download cache directory.",
)
@click.option("-o", "--output-filename", default=None, help="Output filename stem.")
@click.option("--output-css-folder", default=None, help="Output CSS folder.")
@click.option("--output-font-folder", default=None, help="Output font folder.")
@click.option("--output-font-family", default=None, help="Output font family.")
@click.option(
    "--replace-css-links",
    is_flag=True,
    help="Replace existing stylesheet links in crawled markup.",
)
@click.option(
    "--cache-bust",
    is_flag=True,
    help="Append a content hash to output filenames.",
)
@click.option(
    "--codepoint-base",
    callback=parse_codepoint,
    default=None,
    help="First codepoint of the packed font (default: 0xE000).",
)
@click.option(
    "--on-ambiguous-variant",
    type=click.Choice([p.value for p in AmbiguousVariantPolicy]),
    default=None,
    help="What to do when an icon selects several font faces.",
)
@click.option(
    "--share-codepoint-counter",
    is_flag=True,
    help="Keep allocating codepoints across stylesheets instead of restarting.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output.")
def minify(directory, verbose, **overrides):
    """Minify icon fonts used by the site in DIRECTORY."""
    from icon_minifier.config.options import MinifierOptions
    from icon_minifier.pipeline.runner import minify_site
    from icon_minifier.utils.logging import logger, set_verbosity

    set_verbosity(verbose)

    try:
        options = MinifierOptions.from_overrides(**overrides)
    except ValueError as e:
        raise click.UsageError(str(e))

    summary = minify_site(directory, options)
    if not summary.ok:
        sys.exit(1)

    logger.info("Minification completed successfully")


@cli.command("clean-cache")
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Download cache directory.",
)
def clean_cache(cache_dir):
    """Remove cached downloads."""
    from pathlib import Path

    from icon_minifier.config.paths import DEFAULT_CACHE_DIR
    from icon_minifier.operations.fetch import ResponseCache
    from icon_minifier.utils.logging import logger

    directory = Path(cache_dir) if cache_dir else DEFAULT_CACHE_DIR
    if not directory.exists():
        logger.info(f"{directory}/ does not exist (skipped)")
        return

    ResponseCache(directory).clear()
    logger.info(f"Removed {directory}/")


if __name__ == "__main__":
    cli()
