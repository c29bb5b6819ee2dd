#!/usr/bin/env python
"""
CLI tool for replaying recorded match events into the feature store.

Supports:
- Replaying a JSON-lines (or JSON array) event recording
- Printing phase statistics and high-impact actions
- Inspecting one player's time series
- Exporting stored features to CSV

Usage:
    python scripts/replay_features.py replay events.jsonl
    python scripts/replay_features.py replay events.jsonl --player p1
    python scripts/replay_features.py replay events.json --csv features.csv
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from config.settings import settings
from app.utils.logger import get_logger, setup_logging
from features import (
    FeatureIngestor,
    GamePhase,
    TemporalFeatureStore,
    features_to_dataframe,
)

logger = get_logger(__name__)


def load_events(path: Path) -> List[Dict[str, Any]]:
    """Load events from a JSON array file or a JSON-lines file."""
    text = path.read_text(encoding="utf-8").strip()
    if not text:
        return []
    if text.startswith("["):
        return json.loads(text)
    return [json.loads(line) for line in text.splitlines() if line.strip()]


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def cli(verbose: bool):
    """Match Telemetry Feature Store CLI Tool"""
    setup_logging(
        log_level="DEBUG" if verbose else settings.logging.level,
        log_format=settings.logging.format,
        log_file=settings.logging.file_path,
        enable_console=settings.logging.enable_console,
    )


@cli.command('replay')
@click.argument('events_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--player', '-p', help='Print the time series for one player')
@click.option('--threshold', '-t', type=float, default=None,
              help='High-impact threshold (default: from settings)')
@click.option('--top', '-n', type=int, default=None,
              help='Number of high-impact features to list (default: from settings)')
@click.option('--csv', 'csv_path', type=click.Path(dir_okay=False, path_type=Path),
              help='Write stored features to this CSV file')
def replay(
    events_file: Path,
    player: Optional[str],
    threshold: Optional[float],
    top: Optional[int],
    csv_path: Optional[Path]
):
    """
    Replay recorded events and summarize the resulting feature store.

    Examples:
        replay match.jsonl
        replay match.jsonl -p p1 -t 0.5
    """
    try:
        events = load_events(events_file)
        ingestor = FeatureIngestor(TemporalFeatureStore())
        ingestor.ingest_many(events)
        store = ingestor.store
    except (OSError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        logger.exception("Event replay failed")
        raise click.Abort()

    click.echo(f"Replayed {ingestor.events_seen} events, stored {store.size()} features "
               f"({ingestor.events_skipped} without a player)")

    click.echo("\nPhase Statistics:")
    for phase in GamePhase:
        stats = store.get_phase_statistics(phase)
        actions = ", ".join(f"{a.action} ({a.count})" for a in stats.top_actions) or "-"
        click.echo(f"  - {phase.value}: {stats.total_features} features, "
                   f"avg impact {stats.avg_impact_score:+.3f}, top: {actions}")

    high_impact = store.get_high_impact_features(threshold=threshold, limit=top)
    click.echo(f"\nHigh-Impact Features ({len(high_impact)}):")
    for feature in high_impact:
        click.echo(f"  - {feature.timestamp.isoformat()} {feature.player_id} "
                   f"{feature.action_type} {feature.impact_score:+.2f}")

    if player:
        series = store.get_player_time_series(player)
        if series is None:
            click.echo(f"\nNo features recorded for player {player}")
        else:
            agg = series.aggregates
            click.echo(f"\nPlayer {player}:")
            click.echo(f"  total actions: {agg.total_actions}")
            click.echo(f"  avg impact: {agg.avg_impact_score:+.3f}")
            click.echo(f"  positive/negative: {agg.positive_actions}/{agg.negative_actions}")
            click.echo(f"  early/mid/late: {agg.phase_breakdown.early}/"
                       f"{agg.phase_breakdown.mid}/{agg.phase_breakdown.late}")

    if csv_path:
        frame = features_to_dataframe(store.query())
        frame.to_csv(csv_path, index=False)
        click.echo(f"\nWrote {len(frame)} rows to {csv_path}")


if __name__ == '__main__':
    cli()
