"""Command-line interface for Sonata.

Provides commands for:
- compose: Generate a piece from a style label
- transcribe: Convert a monophonic recording to notation
- convert: Re-encode a MIDI file or composition JSON
- pdf: Assemble rendered score pages into a PDF
"""

import json
from pathlib import Path
from typing import Dict, List, Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeRemainingColumn
from rich.table import Table

from .core import Composition, SonataError

app = typer.Typer(
    name="sonata",
    help="Algorithmic composition, notation export and audio transcription",
    rich_markup_mode="markdown",
)
console = Console()

FORMAT_SUFFIXES = {
    "abc": ".abc",
    "musicxml": ".musicxml",
    "midi": ".mid",
    "json": ".json",
}
DEFAULT_FORMATS = ["abc", "musicxml", "midi"]


def write_outputs(
    composition: Composition,
    output_dir: Path,
    stem: str,
    formats: List[str],
) -> Dict[str, Path]:
    """Write a composition in each requested format; return paths by format."""
    from .output import ABCEncoder, MIDIExporter, MusicXMLExporter

    unknown = [f for f in formats if f not in FORMAT_SUFFIXES]
    if unknown:
        raise typer.BadParameter(
            f"Unknown format(s): {', '.join(unknown)}. Choose from {', '.join(FORMAT_SUFFIXES)}"
        )

    output_dir.mkdir(parents=True, exist_ok=True)
    written = {}
    for fmt in formats:
        path = output_dir / f"{stem}{FORMAT_SUFFIXES[fmt]}"
        if fmt == "abc":
            ABCEncoder().export(composition, str(path))
        elif fmt == "musicxml":
            MusicXMLExporter().export(composition, str(path))
        elif fmt == "midi":
            MIDIExporter().export(composition, str(path))
        else:
            path.write_text(json.dumps(composition.to_dict(), indent=2), encoding="utf-8")
        written[fmt] = path
    return written


def _file_stem(title: str) -> str:
    return "_".join(title.split()) or "composition"


def _report(composition: Composition, written: Dict[str, Path], json_output: bool, verbose: bool) -> None:
    if json_output:
        console.print_json(
            data={
                "title": composition.title,
                "composer": composition.composer,
                "tempo": composition.tempo,
                "tracks": len(composition.tracks),
                "notes_count": len(composition.all_notes),
                "outputs": {fmt: str(p) for fmt, p in written.items()},
            }
        )
        return

    for fmt, path in written.items():
        console.print(f"  [blue]{fmt}:[/blue] {path}")
    if verbose and composition.all_notes:
        _show_notes_table(composition)


@app.command()
def compose(
    style: str = typer.Option("Classical", "-s", "--style", help="Style label, e.g. Baroque, Beethoven, Romantic"),
    title: Optional[str] = typer.Option(None, "-t", "--title", help="Piece title (random if omitted)"),
    subtitle: Optional[str] = typer.Option(None, "--subtitle", help="Subtitle line"),
    composer: Optional[str] = typer.Option(None, "-c", "--composer", help="Name credited as composer"),
    instrument: str = typer.Option("Piano", "-i", "--instrument", help="Instrument label"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for reproducible output"),
    bass_rests: float = typer.Option(
        0.4, "--bass-rests", min=0.0, max=1.0, help="Probability that a bass bar is a rest"
    ),
    output_dir: Path = typer.Option(Path("."), "-o", "--output-dir", help="Directory for output files"),
    formats: List[str] = typer.Option(DEFAULT_FORMATS, "-f", "--format", help="abc, musicxml, midi, json"),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON (for scripting)"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
):
    """Generate a two-voice composition from a style label.

    **Examples:**

        sonata compose --style Baroque --title "Invention" --seed 7

        sonata compose -s Romantic -f abc -f json -o out/
    """
    from .generation import GeneratorConfig, StochasticGenerator

    generator = StochasticGenerator(seed=seed, config=GeneratorConfig(bass_rest_probability=bass_rests))
    if not json_output:
        console.print(f"[blue]Composing in style:[/blue] {style}")

    composition = generator.compose(
        style, title=title, composer=composer, instrument=instrument, subtitle=subtitle
    )
    written = write_outputs(composition, output_dir, _file_stem(composition.title), formats)

    if not json_output:
        console.print(
            f"[green]Composed '{composition.title}' at {composition.tempo} BPM "
            f"({len(composition.all_notes)} notes)[/green]"
        )
    _report(composition, written, json_output, verbose)


@app.command()
def transcribe(
    input_file: Path = typer.Argument(..., help="Input audio file, WAV, MP3, FLAC or OGG"),
    output_dir: Optional[Path] = typer.Option(None, "-o", "--output-dir", help="Directory for output files"),
    formats: List[str] = typer.Option(DEFAULT_FORMATS, "-f", "--format", help="abc, musicxml, midi, json"),
    tempo: float = typer.Option(100.0, "-t", "--tempo", help="Tempo used to convert seconds to beats"),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON (for scripting)"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
):
    """Transcribe a single-melody recording into notation.

    The recording's own tempo is not detected; `--tempo` sets the grid.

    **Examples:**

        sonata transcribe melody.wav

        sonata transcribe humming.mp3 -o out/ -f musicxml
    """
    from .input import AudioLoader
    from .transcription import AutocorrelationTranscriber, TranscriberConfig

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    output_dir = output_dir or input_file.parent

    try:
        if not json_output:
            console.print(f"[blue]Loading audio:[/blue] {input_file}")
        loader = AudioLoader(target_sr=None)
        audio, sr = loader.load(str(input_file))
        if verbose and not json_output:
            console.print(f"  Duration: {loader.get_duration(audio, sr):.2f}s, Sample rate: {sr}Hz")

        transcriber = AutocorrelationTranscriber(TranscriberConfig(tempo=tempo))
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TimeRemainingColumn(),
            console=console,
            disable=json_output,
        ) as progress:
            task = progress.add_task("Analyzing pitch...", total=1.0)
            composition = transcriber.transcribe(
                audio,
                sr,
                title=input_file.stem,
                on_progress=lambda fraction, eta: progress.update(task, completed=fraction),
            )
    except SonataError as e:
        console.print(f"[red]Transcription failed: {e}[/red]")
        raise typer.Exit(1)

    written = write_outputs(composition, output_dir, _file_stem(composition.title), formats)
    if not json_output:
        console.print(f"[green]Transcribed {len(composition.all_notes)} notes[/green]")
    _report(composition, written, json_output, verbose)


@app.command()
def convert(
    input_file: Path = typer.Argument(..., help="MIDI file or composition JSON"),
    output_dir: Optional[Path] = typer.Option(None, "-o", "--output-dir", help="Directory for output files"),
    formats: List[str] = typer.Option(DEFAULT_FORMATS, "-f", "--format", help="abc, musicxml, midi, json"),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON (for scripting)"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose output"),
):
    """Normalize a MIDI file or composition JSON and re-encode it."""
    from .input import MidiImporter
    from .processing import normalize_composition

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    suffix = input_file.suffix.lower()
    try:
        if suffix in (".mid", ".midi"):
            composition = MidiImporter().load(input_file)
        elif suffix == ".json":
            data = json.loads(input_file.read_text(encoding="utf-8"))
            composition = normalize_composition(Composition.from_dict(data))
        else:
            console.print(f"[red]Error: Unsupported input format: {suffix}[/red]")
            raise typer.Exit(1)
    except (SonataError, json.JSONDecodeError) as e:
        console.print(f"[red]Conversion failed: {e}[/red]")
        raise typer.Exit(1)

    output_dir = output_dir or input_file.parent
    written = write_outputs(composition, output_dir, _file_stem(composition.title), formats)
    _report(composition, written, json_output, verbose)


@app.command()
def pdf(
    pages: List[Path] = typer.Argument(..., help="Page images in reading order (PNG, JPEG, ...)"),
    output: Path = typer.Option(Path("score.pdf"), "-o", "--output", help="Output PDF path"),
):
    """Assemble rendered score pages into a PDF."""
    from .output import PageImage, write_pdf

    try:
        images = [PageImage.from_file(p) for p in pages]
        write_pdf(images, output)
    except SonataError as e:
        console.print(f"[red]PDF export failed: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Wrote {len(images)} page(s) to {output}[/green]")


def _show_notes_table(composition: Composition):
    """Display notes in a table."""
    table = Table(title=composition.title)
    table.add_column("Staff", style="blue")
    table.add_column("Pitch", style="cyan")
    table.add_column("Beat", style="green")
    table.add_column("Length", style="yellow")
    table.add_column("Velocity", style="magenta")

    for staff, track in enumerate(composition.tracks, start=1):
        for note in track.notes:
            table.add_row(
                str(staff),
                note.pitch_name,
                f"{note.time:.2f}",
                f"{note.duration:.2f}",
                f"{note.velocity:.2f}",
            )

    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
