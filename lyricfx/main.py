"""
Main CLI interface for lyricfx

This module provides the command-line interface for the lyrics overlay:
running the live overlay against the local media player, one-shot lyrics
lookups, LRC inspection, effects rule debugging, configuration display and
system diagnostics.

The CLI is built using Click framework and provides:
- watch: live synchronized lyrics with effects for the playing track
- fetch: resolve lyrics for a title once (optionally translated)
- parse: print an LRC file as a timeline with epic line markers
- effects: evaluate the effects rule engine on a lyric line
- config: show or save the current configuration
- doctor: connectivity and dependency checks
"""

import asyncio
import functools
import json
import random
import sys
from pathlib import Path

import click
import requests

from . import __version__
from .ai.client import GenerativeTextClient
from .config.settings import get_settings, reload_settings
from .effects.engine import EffectsEngine
from .effects.rules import CORE_RULES
from .lyrics.lrc import epic_markers, parse_lrc
from .lyrics.lrclib import LrcLibClient
from .lyrics.models import ResolvedLyrics
from .lyrics.resolver import TrackResolver
from .lyrics.translation import TranslationAdapter
from .player.playerctl import PlayerctlSource, create_player_source
from .render.console import ConsoleRenderer
from .sync.session import LyricsSession
from .utils.helpers import format_duration, format_timestamp
from .utils.logger import configure_from_settings, get_current_log_file, get_logger


# Initialize logging system from configuration settings
configure_from_settings()
logger = get_logger(__name__)


def print_banner():
    """Print application banner to console"""
    banner = """
╔═══════════════════════════════════════════════╗
║                    lyricfx                    ║
║                                               ║
║   Synchronized lyrics with reactive effects   ║
╚═══════════════════════════════════════════════╝
    """
    click.echo(click.style(banner, fg='magenta', bold=True))


def handle_error(func):
    """
    Decorator to handle common CLI errors gracefully

    Args:
        func: The CLI command function to wrap

    Returns:
        Wrapped function with error handling
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo(click.style("\n\nOperation cancelled by user", fg='yellow'))
            sys.exit(130)  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Command failed: {e}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
    return wrapper


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', type=click.Path(), help='Path to config file')
@click.pass_context
def cli(ctx, version, verbose, config):
    """
    lyricfx - Synchronized lyrics overlay with effects

    Follows the track playing in your media player, fetches time-synced
    lyrics, highlights the line being sung and fires visual effects for it.
    """
    ctx.ensure_object(dict)

    if version:
        click.echo(f"lyricfx v{__version__}")
        return

    if config:
        reload_settings(config)
        configure_from_settings()
        click.echo(f"Loaded config: {config}")

    if verbose:
        ctx.obj['verbose'] = True
        logger.info("Verbose mode enabled")

    if ctx.invoked_subcommand is None:
        print_banner()
        click.echo(ctx.get_help())


@cli.command()
@click.option('--player', 'player_name', help='Only follow this MPRIS player (e.g. spotify)')
@click.option('--no-ai', is_flag=True, help='Disable AI-generated effects')
@click.option('--no-effects', is_flag=True, help='Disable all effects')
@click.option('--translate', 'language', help='Translate lyrics into this language')
@handle_error
def watch(player_name, no_ai, no_effects, language):
    """
    Show live lyrics for the playing track

    Polls the media player, resolves lyrics on every track change and prints
    each line as it is sung. Stop with Ctrl+C.
    """
    settings = get_settings().snapshot()

    if player_name:
        settings.player.player_name = player_name
    if no_ai:
        settings.ai.enabled = False
    if no_effects:
        settings.effects.enabled = False
    if language:
        settings.translation.enabled = True
        settings.translation.target_language = language

    errors = settings.validation_errors()
    if errors:
        for error in errors:
            click.echo(click.style(f"Configuration error: {error}", fg='red'), err=True)
        sys.exit(1)

    if settings.player.backend == 'playerctl' and not PlayerctlSource.is_available():
        click.echo(click.style("playerctl not found - install it to follow your media player", fg='red'), err=True)
        sys.exit(1)

    if settings.translation.enabled and not settings.translation_available:
        click.echo(click.style("Translation needs GEMINI_API_KEY; continuing without it", fg='yellow'))
    if settings.effects.enabled and settings.ai.enabled and not settings.ai_available:
        logger.info("No generative API key configured, using core effects only")

    print_banner()
    click.echo(f"Waiting for a track... ({settings})\n")

    asyncio.run(_watch(settings))


async def _watch(settings):
    session = LyricsSession(
        player=create_player_source(settings),
        renderer=ConsoleRenderer.from_settings(settings),
        settings=settings,
    )
    await session.run()


@cli.command()
@click.argument('title')
@click.option('--artist', '-a', default='', help='Artist name')
@click.option('--duration', '-d', type=float, help='Played duration in seconds')
@click.option('--translate', 'language', help='Translate lyrics into this language')
@click.option('--json', 'as_json', is_flag=True, help='Print the result as JSON')
@handle_error
def fetch(title, artist, duration, language, as_json):
    """
    Resolve lyrics for TITLE once

    Uses the same title cleaning, candidate selection and tempo correction as
    the live overlay.
    """
    settings = get_settings().snapshot()
    if language:
        settings.translation.enabled = True
        settings.translation.target_language = language
        if not settings.translation_available:
            raise click.UsageError("Translation needs GEMINI_API_KEY")

    resolved = asyncio.run(_fetch(settings, title, artist, duration, bool(language)))

    if as_json:
        click.echo(json.dumps(resolved.to_dict(), indent=2, ensure_ascii=False))
        return

    click.echo(click.style(f"Query: {resolved.query}", dim=True))
    if resolved.speed_ratio != 1.0:
        click.echo(click.style(f"Tempo-corrected by {resolved.speed_ratio:.3f}", fg='yellow'))

    if resolved.is_synced:
        for line in resolved.timeline:
            click.echo(f"[{format_timestamp(line.time_seconds)}] {line.text}")
    else:
        click.echo(click.style("(unsynced lyrics)", dim=True))
        click.echo(resolved.plain_text)


async def _fetch(settings, title, artist, duration, translate):
    client = LrcLibClient(
        api_base=settings.lyrics.api_base,
        timeout=settings.lyrics.request_timeout,
        rate_limit=settings.lyrics.rate_limit,
    )
    try:
        resolved = await TrackResolver(client, settings).resolve(title, artist, duration)
    finally:
        await client.close()

    if not translate:
        return resolved

    ai_client = GenerativeTextClient(
        api_key=settings.ai.api_key,
        model=settings.ai.model,
        endpoint=settings.ai.endpoint,
        timeout=settings.ai.request_timeout,
    )
    try:
        adapter = TranslationAdapter(ai_client, settings)
        if resolved.is_synced:
            translated = await adapter.translate_lines(resolved.timeline, artist, title)
            if translated is not None:
                return ResolvedLyrics(
                    candidate=resolved.candidate,
                    timeline=translated,
                    speed_ratio=resolved.speed_ratio,
                    modified=resolved.modified,
                    query=resolved.query,
                )
        else:
            text = await adapter.translate_plain(resolved.plain_text, artist, title)
            if text is not None:
                return ResolvedLyrics(
                    candidate=resolved.candidate,
                    plain_text=text,
                    modified=resolved.modified,
                    query=resolved.query,
                )
        click.echo(click.style("Translation unavailable, showing original lyrics", fg='yellow'), err=True)
        return resolved
    finally:
        await ai_client.close()


@cli.command()
@click.argument('lrc_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--threshold', type=float, help='Seconds after which a line counts as epic')
@handle_error
def parse(lrc_file, threshold):
    """
    Print an LRC file as a timeline

    Long-held lines are marked with a star.
    """
    settings = get_settings()
    text = Path(lrc_file).read_text(encoding='utf-8')
    timeline = parse_lrc(text)

    if not timeline:
        click.echo(click.style("No timed lines found", fg='yellow'))
        return

    markers = epic_markers(
        timeline,
        threshold if threshold is not None else settings.display.epic_threshold,
        settings.display.last_line_duration
    )
    for line, duration, epic in markers:
        stamp = f"[{format_timestamp(line.time_seconds)}]"
        text = f"{stamp} {line.text}  ({duration:.1f}s)"
        click.echo(click.style(f"{text}  *", fg='magenta', bold=True) if epic else text)

    click.echo(f"\n{len(timeline)} lines, last line at {format_duration(timeline[-1].time_seconds)}")


@cli.command()
@click.argument('line')
@click.option('--seed', type=int, help='Seed the random source for reproducible results')
@click.option('--runs', type=click.IntRange(1, 10000), default=1, help='Evaluate the line this many times')
@handle_error
def effects(line, seed, runs):
    """
    Show which effects LINE would fire

    Some effects fire probabilistically; use --runs to see the distribution.
    """
    engine = EffectsEngine.from_settings(get_settings(), rng=random.Random(seed))

    if runs == 1:
        fired = engine.evaluate(line)
        click.echo(", ".join(fired) if fired else "(no effects)")
        return

    counts = {}
    for _ in range(runs):
        key = ", ".join(engine.evaluate(line)) or "(no effects)"
        counts[key] = counts.get(key, 0) + 1

    for key, count in sorted(counts.items(), key=lambda item: -item[1]):
        click.echo(f"{count / runs:6.1%}  {key}")


@cli.group()
def config():
    """Configuration management"""
    pass


@config.command()
@handle_error
def show():
    """Show current configuration"""
    settings = get_settings()

    click.echo("Current Configuration:\n")

    click.echo("Lyrics:")
    click.echo(f"   API: {settings.lyrics.api_base}")
    click.echo(f"   Duration tolerance: {settings.lyrics.duration_tolerance}s")
    click.echo(f"   Modified keywords: {', '.join(settings.lyrics.modified_keywords)}")

    click.echo("\nAI effects:")
    click.echo(f"   Enabled: {settings.ai.enabled}")
    click.echo(f"   API key: {'set' if settings.ai.api_key else 'not set'}")
    click.echo(f"   Model: {settings.ai.model}")
    click.echo(f"   Race timeout: {settings.ai.race_timeout}s")

    click.echo("\nTranslation:")
    click.echo(f"   Enabled: {settings.translation.enabled}")
    click.echo(f"   Target language: {settings.translation.target_language}")

    click.echo("\nSync:")
    click.echo(f"   Sync interval: {settings.sync.sync_interval}s")
    click.echo(f"   Track poll interval: {settings.sync.poll_interval}s")
    click.echo(f"   Track change confirmations: {settings.sync.track_change_confirmations}")

    click.echo("\nEffects:")
    click.echo(f"   Enabled: {settings.effects.enabled}")
    click.echo(f"   Core effects: {', '.join(rule.id for rule in CORE_RULES)}")

    click.echo("\nPlayer:")
    click.echo(f"   Backend: {settings.player.backend}")
    click.echo(f"   Player: {settings.player.player_name or '(any)'}")


@config.command()
@click.option('--path', type=click.Path(dir_okay=False), help='Write to this file instead of ~/.lyricfx/config.yaml')
@handle_error
def save(path):
    """Write the current configuration to a YAML file (without the API key)"""
    settings = get_settings()
    settings.save_config(path)
    click.echo(f"Configuration saved to {path or settings.get_config_directory() / 'config.yaml'}")


@cli.command()
@handle_error
def doctor():
    """
    Run system diagnostics

    Checks configuration, the player tool, lyrics API and generative API
    connectivity.
    """
    click.echo("Running diagnostics...\n")

    issues = []
    settings = get_settings()

    errors = settings.validation_errors()
    if errors:
        click.echo("Configuration: invalid")
        issues.extend(errors)
    else:
        click.echo("Configuration: OK")

    if PlayerctlSource.is_available():
        click.echo("playerctl: OK")
    else:
        click.echo("playerctl: Not installed")
        issues.append("Install playerctl to follow the media player")

    try:
        response = requests.get(
            f"{settings.lyrics.api_base}/search",
            params={'q': 'hello'},
            headers={'User-Agent': settings.lyrics.user_agent},
            timeout=settings.lyrics.request_timeout
        )
        if response.status_code == 200:
            click.echo("Lyrics API: OK")
        else:
            click.echo(f"Lyrics API: HTTP {response.status_code}")
            issues.append("Lyrics API is not answering normally")
    except requests.RequestException as e:
        click.echo(f"Lyrics API: Error - {e}")
        issues.append("Lyrics API is unreachable")

    if settings.ai.api_key:
        try:
            response = requests.get(
                f"{settings.ai.endpoint}/models/{settings.ai.model}",
                params={'key': settings.ai.api_key},
                timeout=settings.ai.request_timeout
            )
            if response.status_code == 200:
                click.echo(f"Generative API: OK ({settings.ai.model})")
            else:
                click.echo(f"Generative API: HTTP {response.status_code}")
                issues.append("Generative API rejected the key or model")
        except requests.RequestException as e:
            click.echo(f"Generative API: Error - {e}")
            issues.append("Generative API is unreachable")
    else:
        click.echo("Generative API: No key (AI effects and translation disabled)")

    current_log = get_current_log_file()
    if current_log:
        click.echo(f"Logging: {current_log}")
    else:
        click.echo("Logging: Console only")

    if issues:
        click.echo(f"\nFound {len(issues)} issues:")
        for issue in issues:
            click.echo(f"   • {issue}")
    else:
        click.echo("\nAll systems operational!")


if __name__ == '__main__':
    cli()
