"""Command-line interface for Score Scanner.

Provides commands for:
- convert: Turn a JSON list of pitch detections into a SATB MIDI file
- info: Show header and note information for a MIDI file
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

app = typer.Typer(
    name="score-scanner",
    help="Sheet music detections to voice-separated MIDI",
    rich_markup_mode="markdown",
)
console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def load_detections(path: Path, default_duration: float) -> List["RawDetection"]:
    """
    Load raw detections from a JSON file.

    Accepts a list of objects, or an object with a "detections" list.
    Each object needs "pitch"; "confidence" defaults to 1.0 and
    "duration" (beats) to default_duration. "position", "timestamp",
    "x" and "y" are optional.

    Args:
        path: JSON file path
        default_duration: Duration in beats for detections without one

    Returns:
        List of RawDetection in file order

    Raises:
        ContractViolation: If the file is not a list of detection objects
    """
    from .core import ContractViolation, RawDetection

    data = json.loads(path.read_text())
    if isinstance(data, dict):
        data = data.get("detections", [])
    if not isinstance(data, list):
        raise ContractViolation(message="detections must be a list", field_name="detections", value=data)

    detections = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ContractViolation(
                message=f"detection {index} must be an object",
                field_name="detections",
                value=item,
            )
        detections.append(
            RawDetection(
                pitch=item["pitch"],
                confidence=item.get("confidence", 1.0),
                duration=item.get("duration", default_duration),
                position_hint=item.get("position"),
                timestamp=item.get("timestamp"),
                x=item.get("x"),
                y=item.get("y"),
            )
        )
    return detections


@app.command()
def convert(
    input_file: Path = typer.Argument(..., help="JSON file of pitch detections"),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Output MIDI file path"
    ),
    tempo: float = typer.Option(
        120.0, "-t", "--tempo", help="Tempo (BPM)"
    ),
    threshold: float = typer.Option(
        0.5, "--threshold", help="Minimum detection confidence (0-1)"
    ),
    duration_ms: float = typer.Option(
        100.0, "--duration-ms", help="Duration for detections without one (milliseconds)"
    ),
    mute: List[str] = typer.Option(
        [], "--mute", "-m", help="Voice to mute: soprano/alto/tenor/bass (repeatable)"
    ),
    verbose: bool = typer.Option(
        False, "-v", "--verbose", help="Verbose output"
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output results as JSON (for scripting)"
    ),
):
    """Convert pitch detections to a voice-separated MIDI file.

    **Examples:**

        score-scanner convert detections.json

        score-scanner convert detections.json -o choir.mid -t 90 --mute bass
    """
    from .core import ScannerError, Voice
    from .core.note import ms_to_beats
    from .classification import classify_all
    from .sequencing import build, with_voice_muted
    from .output import MIDIExporter

    _configure_logging(verbose)

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    try:
        muted = [Voice(name.lower()) for name in mute]
    except ValueError:
        console.print(f"[red]Error: Unknown voice in {mute}[/red]")
        raise typer.Exit(1)

    # Default output path
    if output is None:
        output = input_file.with_suffix(".mid")

    try:
        detections = load_detections(input_file, ms_to_beats(duration_ms, tempo))
        kept = [d for d in detections if d.confidence >= threshold]
        if not json_output:
            console.print(f"[blue]Loaded:[/blue] {len(detections)} detections, {len(kept)} above threshold")

        notes = classify_all(kept)
        sequence = build(notes, tempo)
        for voice in muted:
            sequence = with_voice_muted(sequence, voice)

        exporter = MIDIExporter()
        exporter.export(sequence, str(output))
    except (ScannerError, KeyError, json.JSONDecodeError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if json_output:
        result: Dict[str, Any] = {
            "input": str(input_file),
            "output": str(output),
            "detections": len(detections),
            "notes_count": len(notes),
            "tempo": tempo,
            "total_duration": sequence.total_duration,
            "voices": {
                voice.value: sum(1 for e in events if e.is_note_on)
                for voice, events in sequence.voices.items()
            },
            "muted": [v.value for v in muted],
        }
        console.print_json(data=result)
        return

    _show_voices_table(sequence, muted)
    if verbose and notes:
        _show_notes_table(notes)
    console.print(f"[green]Wrote {output}[/green]")


@app.command()
def info(
    input_file: Path = typer.Argument(..., help="Input MIDI file"),
):
    """Show information about a MIDI file."""
    import pretty_midi
    from .core import EncodingError
    from .output import read_header

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    data = input_file.read_bytes()
    try:
        header = read_header(data)
    except EncodingError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(f"\n[bold]MIDI Info:[/bold] {input_file.name}")
    console.print(f"  Format: {header.format}, tracks: {header.num_tracks}")
    console.print(f"  Ticks per beat: {header.ticks_per_beat}")
    console.print(f"  Track length: {header.track_length} bytes")

    midi = pretty_midi.PrettyMIDI(str(input_file))
    _, tempi = midi.get_tempo_changes()
    if len(tempi):
        console.print(f"  Tempo: {tempi[0]:.1f} BPM")
    console.print(f"  Duration: {midi.get_end_time():.2f} seconds")

    table = Table(title="Notes per Channel")
    table.add_column("Instrument", style="cyan")
    table.add_column("Notes", style="green")
    for instrument in midi.instruments:
        table.add_row(instrument.name or f"program {instrument.program}", str(len(instrument.notes)))
    console.print(table)


def _show_voices_table(sequence, muted):
    """Display per-voice note counts."""
    table = Table(title="Voices")
    table.add_column("Voice", style="cyan")
    table.add_column("Notes", style="green")
    table.add_column("Muted", style="magenta")

    for voice, events in sequence.voices.items():
        table.add_row(
            voice.value,
            str(sum(1 for e in events if e.is_note_on)),
            "yes" if voice in muted else "",
        )

    console.print(table)


def _show_notes_table(notes):
    """Display classified notes in a table."""
    table = Table(title="Classified Notes")
    table.add_column("Pitch", style="cyan")
    table.add_column("Voice", style="green")
    table.add_column("Duration (beats)", style="yellow")
    table.add_column("Confidence", style="magenta")

    for note in notes:
        table.add_row(
            note.pitch_name,
            note.voice.value,
            f"{note.duration:.3f}",
            f"{note.confidence:.2f}",
        )

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
