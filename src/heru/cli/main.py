# Copyright 2025 HERU Contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Command-line interface for HERU.

Commands:
    translate  Translate text or a file between Hebrew and Russian
    feedback   Record a rating and optional correction for a translation
    retrain    Learn from stored feedback
    terms      List or import terminology
"""

from __future__ import annotations

import asyncio
import logging
import warnings
from pathlib import Path

import typer
from rich.table import Table

from heru import __version__
from heru.core.engine import TranslationEngine
from heru.core.errors import HeruError, QualityReject, UnknownTermWarning
from heru.core.models import Language, TranslationResult
from heru.core.snapshot import JsonSnapshotStore
from heru.feedback.store import FeedbackStore
from heru.terminology.lexicon import TermLexicon
from heru.utils.config import get_settings
from heru.utils.console import (
    OUTCOME_STYLES,
    console,
    issues_table,
    print_error,
    print_info,
    print_success,
    print_warning,
)

app = typer.Typer(
    name="heru",
    help="HERU - Hebrew/Russian technical translation core",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

terms_app = typer.Typer(name="terms", help="Manage terminology", no_args_is_help=True)
app.add_typer(terms_app, name="terms")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"HERU version: [bold cyan]{__version__}[/bold cyan]")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(  # noqa: ARG001 - Used by Typer callback
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """HERU - Hebrew/Russian technical translation core."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(message)s", force=True)
    # unknown terms are already listed among the result flags
    warnings.filterwarnings("ignore", category=UnknownTermWarning)


def _engine() -> TranslationEngine:
    """Open the engine on the configured store, exiting with code 1 if it cannot load."""
    settings = get_settings()
    try:
        return TranslationEngine(
            settings=settings,
            feedback_store=FeedbackStore(settings.feedback_db),
            snapshot_store=JsonSnapshotStore(settings.snapshot_dir),
        )
    except HeruError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def _print_result(result: TranslationResult) -> None:
    console.print(result.translation)
    console.print()
    style = OUTCOME_STYLES[result.verdict.outcome]
    console.print(
        f"[dim]{result.source_lang.value} → {result.target_lang.value} · "
        f"domain {result.domain} · snapshot v{result.snapshot_version} · "
        f"[{style}]{result.verdict.outcome.value}[/{style}][/dim]"
    )

    if result.alternatives:
        table = Table(title="Alternatives", show_header=False)
        table.add_column("#", style="dim", justify="right")
        table.add_column("Text", style="cyan")
        for i, alternative in enumerate(result.alternatives, start=1):
            table.add_row(str(i), alternative)
        console.print(table)

    if result.flags:
        console.print(issues_table(result.flags))


@app.command()
def translate(
    text: str | None = typer.Argument(None, help="Text to translate"),
    file: Path | None = typer.Option(None, "--file", "-f", help="Read text from file"),
    source_lang: str = typer.Option("auto", "--from", "-s", help="Source language (he, ru, auto)"),
    target_lang: str | None = typer.Option(None, "--to", "-t", help="Target language"),
    domain: str = typer.Option("auto", "--domain", "-d", help="Domain tag or 'auto'"),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON"),
) -> None:
    """Translate text between Hebrew and Russian.

    Example:
        heru translate "לחץ גבוה במערכת" --to ru
        heru translate --file manual.txt --from ru --domain fire_safety
    """
    if file is not None:
        if not file.exists():
            print_error(f"File not found: {file}")
            raise typer.Exit(code=1)
        text = file.read_text(encoding="utf-8")
    if not text:
        print_error("Provide text or --file")
        raise typer.Exit(code=1)

    engine = _engine()
    try:
        result = asyncio.run(engine.translate(text, source_lang, target_lang, domain))
    except QualityReject as e:
        print_error(str(e))
        console.print(issues_table(e.reasons, title="Rejection reasons"))
        raise typer.Exit(code=2)
    except HeruError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    finally:
        engine.close()

    if as_json:
        console.print_json(result.model_dump_json())
    else:
        _print_result(result)


@app.command()
def feedback(
    original: str = typer.Argument(..., help="Original source text"),
    output: str = typer.Argument(..., help="Translation that was produced"),
    rating: int = typer.Option(..., "--rating", "-r", min=1, max=5, help="Rating 1 (bad) .. 5"),
    correction: str | None = typer.Option(None, "--correction", "-c", help="Corrected text"),
    source_lang: str | None = typer.Option(None, "--from", "-s", help="Source language"),
    domain: str = typer.Option("general", "--domain", "-d", help="Domain tag"),
) -> None:
    """Record feedback on a translation.

    Example:
        heru feedback "לחץ גבוה" "высокое нажатие" -r 1 -c "высокое давление"
    """
    engine = _engine()
    try:
        record = engine.submit_feedback(
            original, output, correction, rating, source_lang=source_lang, domain=domain
        )
        engine.feedback_store.flush()
        print_success(
            f"Feedback recorded ({record.source_lang.value} → {record.target_lang.value}, "
            f"rating {record.rating})"
        )
        report = engine.maybe_retrain()
        if report is not None:
            print_info(f"Retrained: snapshot v{report.version}")
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    finally:
        engine.close()


@app.command()
def retrain() -> None:
    """Learn from stored feedback and publish a new snapshot."""
    engine = _engine()
    try:
        report = engine.retrain()
    except HeruError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    finally:
        engine.close()

    if not report.changed:
        print_info(f"No new feedback; snapshot v{report.version} unchanged")
        return

    print_success(f"Snapshot v{report.version} from {report.records} feedback records")
    table = Table(title="Ranking weights")
    table.add_column("Feature", style="cyan")
    table.add_column("Weight", justify="right")
    for name, weight in report.weights.items():
        table.add_row(name, f"{weight:.3f}")
    console.print(table)
    if report.evaluation is not None:
        scores = report.evaluation.scores
        metrics = Table(title=f"Corrected outputs ({report.evaluation.records})")
        metrics.add_column("Metric", style="cyan")
        metrics.add_column("Score", justify="right")
        metrics.add_row("BLEU", f"{scores.bleu:.1f}")
        metrics.add_row("chrF++", f"{scores.chrf:.1f}")
        metrics.add_row("TER", f"{scores.ter:.1f}")
        metrics.add_row("Term accuracy", f"{report.evaluation.term_accuracy:.0%}")
        metrics.add_row("Quality", scores.quality_level)
        console.print(metrics)
    if report.unknown_terms:
        print_warning(f"Unknown terms in feedback: {', '.join(report.unknown_terms)}")


@terms_app.command("list")
def list_terms(
    source_lang: str | None = typer.Option(None, "--from", "-s", help="Filter by source language"),
    domain: str | None = typer.Option(None, "--domain", "-d", help="Filter by domain"),
    limit: int = typer.Option(50, "--limit", "-n", help="Maximum terms to display"),
) -> None:
    """List terminology entries of the current snapshot.

    Example:
        heru terms list --from he --domain fire_safety
    """
    engine = _engine()
    try:
        language = Language.parse(source_lang) if source_lang else None
        lexicon = engine.snapshot.lexicon
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    finally:
        engine.close()

    entries = lexicon.entries_for(language, domain)
    if not entries:
        print_warning("No terms found")
        return
    if len(entries) > limit:
        print_info(f"Showing first {limit} of {len(entries)} terms")
        entries = entries[:limit]

    table = Table(show_header=True, show_lines=False)
    table.add_column("Source", style="cyan", max_width=30)
    table.add_column("Target", style="green", max_width=30)
    table.add_column("Lang", style="yellow", justify="center")
    table.add_column("Domain", style="blue", max_width=15)
    table.add_column("Conf.", justify="right")
    table.add_column("Uses", justify="right", style="dim")
    for entry in entries:
        table.add_row(
            " ".join(entry.source),
            " ".join(entry.target),
            f"{entry.source_lang.value}→{entry.target_lang.value}",
            entry.domain,
            f"{entry.confidence:.2f}",
            str(entry.usage_count),
        )
    console.print(table)
    console.print(f"\n[dim]Lexicon v{lexicon.version}, {len(lexicon)} terms total[/dim]")


@terms_app.command("import")
def import_terms(
    file: Path = typer.Argument(..., help="CSV or JSON term list"),
) -> None:
    """Import terms from CSV (source,target,source_lang,target_lang,...) or lexicon JSON.

    Example:
        heru terms import plumbing.csv
    """
    try:
        if file.suffix.lower() == ".json":
            entries = list(TermLexicon.from_json(file))
        else:
            entries = TermLexicon.read_csv(file)
    except (FileNotFoundError, ValueError) as e:
        print_error(str(e))
        raise typer.Exit(code=1)

    if not entries:
        print_warning("No valid terms in file")
        raise typer.Exit(code=1)

    engine = _engine()
    try:
        snapshot = engine.import_terms(entries)
    finally:
        engine.close()
    print_success(f"Imported {len(entries)} terms into snapshot v{snapshot.version}")


if __name__ == "__main__":
    app()
