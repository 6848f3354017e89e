#!/usr/bin/env python3
"""
Main CLI for the Typestack font-stack engine
============================================

Commands read a configuration document plus a directory of font files,
rebuild the session and print what the engine resolves.
"""

import logging
import sys
from pathlib import Path

import click

# Setup logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

try:
    from src.typestack.core.config import AppConfig
    from src.typestack.core.exceptions import TypeStackError
    from src.typestack.export.css import CSSExporter
    from src.typestack.export.serializer import (
        ConfigSerializer,
        ImportResult,
        read_document,
        required_font_files,
    )
    from src.typestack.fonts.parser import FontToolsParser, parse_font_files
    from src.typestack.stack.resolver import resolve_all
    from src.typestack.stack.snapshot import build_snapshot
except ImportError as e:
    logger.exception(f"Import failed: {e}")
    logger.exception(
        "Make sure you have all dependencies installed and the project is properly set up"
    )
    sys.exit(1)


def _load_app_config(settings_path: Path | None) -> AppConfig:
    app_config = AppConfig.from_env_and_yaml(yaml_path=settings_path)
    root = logging.getLogger()
    # --verbose wins over the configured level
    if root.level != logging.DEBUG:
        root.setLevel(app_config.log_level)
    return app_config


def _find_font_files(fonts_dir: Path | None, wanted: list[str]) -> dict[str, Path]:
    """Map each wanted file name to a file in ``fonts_dir`` (case-insensitive)."""
    if fonts_dir is None:
        return {}
    on_disk = {path.name.lower(): path for path in fonts_dir.iterdir() if path.is_file()}
    return {name: on_disk[name.lower()] for name in wanted if name.lower() in on_disk}


def _import_session(
    config_path: Path,
    fonts_dir: Path | None,
    app_config: AppConfig,
    keep_unresolved: bool,
    font_url_prefix: str = "",
) -> ImportResult:
    document = read_document(config_path)
    wanted = required_font_files(document)
    found = _find_font_files(fonts_dir, wanted)
    logger.info(f"Found {len(found)}/{len(wanted)} required font file(s)")

    parsed = parse_font_files(
        {name: path.read_bytes() for name, path in found.items()},
        parser=FontToolsParser(max_file_bytes=app_config.parser.max_file_bytes),
        max_workers=app_config.parser.max_workers,
    )
    for name, error in parsed.failures.items():
        logger.warning(f"  - {name}: {error}")

    fonts = parsed.to_fonts({name: f"{font_url_prefix}{name}" for name in found})
    serializer = ConfigSerializer(app_name=app_config.css_export.app_name)
    result = serializer.import_config(
        document,
        fonts,
        keep_unresolved=keep_unresolved,
        settings=app_config.typography,
    )
    if result.unresolved_count:
        logger.warning(f"Unresolved references: {result.unresolved_count}")
    return result


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def cli(verbose):
    """Typestack font-stack CLI."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


config_option = click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Path to the JSON configuration document",
)
fonts_dir_option = click.option(
    "--fonts-dir",
    "-f",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory holding the font files the document references",
)
settings_option = click.option(
    "--settings",
    "-s",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to application settings YAML file",
)


@cli.command(name="export-css")
@config_option
@fonts_dir_option
@settings_option
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Write CSS here")
@click.option("--font-face/--no-font-face", default=None, help="Emit @font-face rules")
@click.option("--variables/--no-variables", default=None, help="Emit :root custom properties")
@click.option("--comments/--no-comments", default=None, help="Emit comments")
@click.option("--minify", is_flag=True, help="Collapse the output to a single line")
@click.option("--font-url-prefix", default="", help="Prefix for @font-face src URLs")
@click.option("--keep-unresolved", is_flag=True, help="Keep fonts whose files are missing")
def export_css(
    config,
    fonts_dir,
    settings,
    output,
    font_face,
    variables,
    comments,
    minify,
    font_url_prefix,
    keep_unresolved,
):
    """Generate the stylesheet for a configuration document."""
    try:
        app_config = _load_app_config(settings)
        result = _import_session(config, fonts_dir, app_config, keep_unresolved, font_url_prefix)

        options = app_config.css_export.to_options()
        updates = {
            "include_font_face": font_face,
            "use_css_variables": variables,
            "include_comments": comments,
            "pretty_print": False if minify else None,
        }
        options = options.model_copy(update={k: v for k, v in updates.items() if v is not None})

        snapshot = build_snapshot(result.session)
        css = CSSExporter(app_name=app_config.css_export.app_name).export(snapshot, options=options)

        if output:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(css, encoding="utf-8")
            logger.info(f"Stylesheet written to {output}")
        else:
            click.echo(css, nl=False)

    except TypeStackError as e:
        logger.exception(f"CSS export failed: {e}")
        sys.exit(1)


@cli.command(name="resolve")
@config_option
@fonts_dir_option
@settings_option
@click.option("--language", "-l", "languages", multiple=True, help="Language id (repeatable)")
@click.option("--keep-unresolved", is_flag=True, help="Keep fonts whose files are missing")
def resolve(config, fonts_dir, settings, languages, keep_unresolved):
    """Show the font, scale and line height each language resolves to."""
    try:
        app_config = _load_app_config(settings)
        result = _import_session(config, fonts_dir, app_config, keep_unresolved)
        session = result.session

        resolved = resolve_all(session, languages or None)
        if not resolved:
            click.echo("No fonts in the stack")
            return

        click.echo("Language Resolution")
        click.echo("=" * 40)
        for language_id, item in resolved.items():
            click.echo(
                f"{language_id}: {item.font.source_name} "
                f"[{item.source.value}] scale={item.scale_percent:g}% "
                f"line-height={item.line_height:g} weight={item.weight:g}"
            )

    except TypeStackError as e:
        logger.exception(f"Resolution failed: {e}")
        sys.exit(1)


@cli.command(name="required-fonts")
@config_option
@fonts_dir_option
def required_fonts(config, fonts_dir):
    """List the font files a configuration document needs."""
    try:
        wanted = required_font_files(read_document(config))
        found = _find_font_files(fonts_dir, wanted)

        for name in wanted:
            if fonts_dir is None:
                click.echo(name)
            else:
                status = "found" if name in found else "missing"
                click.echo(f"{name}\t{status}")

        missing = [name for name in wanted if name not in found]
        if fonts_dir is not None and missing:
            logger.warning(f"Missing {len(missing)} font file(s)")
            sys.exit(2)

    except TypeStackError as e:
        logger.exception(f"Reading config failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    cli()
