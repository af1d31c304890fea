import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich import print
from rich.markup import escape
from rich.table import Table

from rtext import codec
from rtext.bundle import LocaleBundle, load_bundle
from rtext.config import DEFAULT_KEY, DEFAULT_WORKERS, RTEXT_EXTENSION, SIGNATURE
from rtext.csv_io import apply_csv_rows, export_page_csv, read_csv_rows
from rtext.document import RTextDocument
from rtext.errors import KeyTooShort, NotFound, RTextError
from rtext.locales import locale_name
from rtext.logging_config import setup_logging

app = typer.Typer(pretty_exceptions_enable=False)

# Shared by every command, set by the callback
state = {"key": DEFAULT_KEY}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show debug output"),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Also write a debug log to this file"
    ),
    key_file: Optional[Path] = typer.Option(
        None, "-k", "--key-file", help="Raw XOR key to use instead of the built-in one"
    ),
):
    """
    Decode, encode and edit RText (.rt2) string tables and locale project folders.
    """
    setup_logging(logging.DEBUG if verbose else logging.INFO, log_file)
    if key_file is not None:
        if not key_file.is_file():
            print(f"[red]Error:[/red] Key file not found: {key_file}")
            raise typer.Exit(code=1)
        state["key"] = key_file.read_bytes()
    else:
        state["key"] = DEFAULT_KEY


def has_signature(file_path: Path) -> bool:
    with open(file_path, "rb") as f:
        return f.read(len(SIGNATURE)) == SIGNATURE


def read_document(file_path: Path) -> RTextDocument:
    """Load a single RText file, turning codec errors into a red message and exit code 1."""
    if not file_path.is_file():
        print(f"[red]Error:[/red] File not found: {file_path}")
        raise typer.Exit(code=1)
    try:
        return codec.load(file_path, state["key"])
    except KeyTooShort as e:
        print(f"[red]Couldn't decrypt all strings of {file_path}:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)
    except (RTextError, OSError) as e:
        print(f"[red]Error reading the file {file_path}:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)


def write_document(document: RTextDocument, output_path: Path) -> None:
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        codec.save(document, output_path)
    except (RTextError, ValueError, OSError) as e:
        print(f"[red]Failed to save {output_path}:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)


def process_file(file_path: Path, output_path: Path, is_decode: bool) -> None:
    """
    Process a single file (decode or encode).
    Decoding writes the document as JSON, encoding reads that JSON back.
    """
    print(f'Processing "{file_path}"')

    if is_decode:
        document = read_document(file_path)
        with open(output_path, "w", encoding="utf-8") as out_json:
            json.dump(document.to_dict(), out_json, indent=2, ensure_ascii=False)
    else:
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            document = RTextDocument.from_dict(data, key=state["key"])
        except (RTextError, ValueError, KeyError) as e:
            print(f"[red]Invalid document JSON {file_path}:[/red] {escape(str(e))}")
            raise typer.Exit(code=1)
        write_document(document, output_path)


@app.command()
def decode(
    input_path: Path = typer.Argument(..., help="Input RText file or folder"),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Output JSON file or folder"
    ),
):
    """
    Decode RText file(s) into JSON.
    All files in a folder are checked for the RText signature.
    """
    if input_path.is_file():
        # Output file will be the original file name with ".json" appended.
        output_path = output or input_path.parent / (input_path.name + ".json")
        output_path.parent.mkdir(parents=True, exist_ok=True)
        process_file(input_path, output_path, True)
    elif input_path.is_dir():
        output_dir = output or input_path.with_name(f"{input_path.name}_json")
        for file in sorted(input_path.glob("**/*")):
            if not file.is_file():
                continue
            try:
                if not has_signature(file):
                    continue
            except OSError as e:
                print(f"[yellow]Error reading file {file}:[/yellow] {escape(str(e))}")
                continue
            out_file = output_dir / file.relative_to(input_path)
            out_file = out_file.with_name(out_file.name + ".json")
            out_file.parent.mkdir(parents=True, exist_ok=True)
            process_file(file, out_file, True)
    else:
        print(f"[red]Error:[/red] {input_path} is not a valid file or directory")
        raise typer.Exit(code=1)


@app.command()
def encode(
    input_path: Path = typer.Argument(..., help="Input JSON file or folder"),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Output RText file or folder"
    ),
):
    """
    Encode JSON back into RText format.
    The output file name is computed by removing the trailing '.json' from the input.
    """
    if input_path.is_file():
        if input_path.suffix == ".json":
            base_name = input_path.stem
            if Path(base_name).suffix == "":
                output_path = output or input_path.parent / (base_name + RTEXT_EXTENSION)
            else:
                output_path = output or input_path.parent / base_name
        else:
            output_path = output or input_path.with_suffix(RTEXT_EXTENSION)
        process_file(input_path, output_path, False)
    elif input_path.is_dir():
        output_dir = output or input_path.with_name(f"{input_path.name}_rtext")
        for file in sorted(input_path.glob("**/*.json")):
            out_file = output_dir / file.relative_to(input_path)
            base_name = out_file.stem
            if Path(base_name).suffix == "":
                out_file = out_file.with_name(base_name + RTEXT_EXTENSION)
            else:
                out_file = out_file.with_name(base_name)
            process_file(file, out_file, False)
    else:
        print(f"[red]Error:[/red] {input_path} is not a valid file or directory")
        raise typer.Exit(code=1)


@app.command()
def pages(
    input_path: Path = typer.Argument(..., help="Input RText file"),
):
    """
    List the pages of an RText file with their entry counts.
    """
    document = read_document(input_path)
    table = Table(title=f"{input_path.name} ({document.variant.name})")
    table.add_column("Page")
    table.add_column("Entries", justify="right")
    table.add_column("Last Id", justify="right")
    for page in document.get_pages().values():
        table.add_row(escape(page.name), str(len(page)), str(page.get_last_id()))
    print(table)


@app.command()
def export_csv(
    input_path: Path = typer.Argument(..., help="Input RText file"),
    page_name: str = typer.Option(..., "-p", "--page", help="Page to export"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Output CSV file"),
):
    """
    Export one page of an RText file to CSV.
    """
    document = read_document(input_path)
    try:
        page = document.get_page(page_name)
    except NotFound as e:
        print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)

    csv_file = output or input_path.with_name(f"{page.name}.csv")
    try:
        count = export_page_csv(page, csv_file)
    except OSError as e:
        print(f"[red]Error exporting CSV:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)
    print(f"[green]Success:[/green] Exported {count} entries to {csv_file}")


@app.command()
def import_csv(
    input_path: Path = typer.Argument(..., help="Input RText file"),
    csv_file: Path = typer.Argument(..., help="CSV file with rows to add or edit"),
    page_name: str = typer.Option(..., "-p", "--page", help="Page to update"),
    output: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Output RText file (defaults to the input)"
    ),
):
    """
    Add or edit rows of one page from a CSV file and save the result.
    """
    if not csv_file.is_file():
        print(f"[red]Error:[/red] CSV file not found: {csv_file}")
        raise typer.Exit(code=1)

    document = read_document(input_path)
    try:
        page = document.get_page(page_name)
        rows = read_csv_rows(csv_file, document.variant)
        count = apply_csv_rows(page, rows)
    except (RTextError, ValueError) as e:
        print(f"[red]Failed to import CSV:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)

    output_path = output or input_path
    write_document(document, output_path)
    print(f"[green]Success:[/green] Added/Edited {count} entries, saved {output_path}")


def import_to_bundle(result: LocaleBundle, csv_file: Path, page_name: str) -> None:
    documents = result.documents
    if not documents:
        print("[red]Error:[/red] No locale could be loaded, nothing to import into")
        raise typer.Exit(code=1)
    # Rows are parsed for the variant of the first loaded locale
    variant = next(iter(documents.values())).variant
    try:
        rows = read_csv_rows(csv_file, variant)
        changed = result.apply_csv_rows_all(page_name, rows)
    except (RTextError, ValueError, OSError) as e:
        print(f"[red]Failed to import CSV:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)
    print(
        f"[green]Success:[/green] Added/Edited {len(rows)} entries of page "
        f"'{escape(page_name)}' in {changed} locales"
    )


@app.command()
def bundle(
    folder: Path = typer.Argument(..., help="Project folder with locale files or folders"),
    save_to: Optional[Path] = typer.Option(
        None, "-s", "--save-to", help="Save every loaded locale into this folder"
    ),
    workers: int = typer.Option(
        DEFAULT_WORKERS, "-w", "--workers", help="Locales decoded in parallel"
    ),
    csv_file: Optional[Path] = typer.Option(
        None, "--import-csv", help="CSV rows to add or edit in every locale"
    ),
    page_name: Optional[str] = typer.Option(
        None, "-p", "--page", help="Page the CSV rows go to"
    ),
):
    """
    Load every locale of a project folder and report the outcome per locale.
    With --import-csv the rows are applied to every locale that has the page
    and the project is saved, back in place unless --save-to is given.
    """
    if csv_file is not None:
        if page_name is None:
            print("[red]Error:[/red] --import-csv needs --page")
            raise typer.Exit(code=1)
        if not csv_file.is_file():
            print(f"[red]Error:[/red] CSV file not found: {csv_file}")
            raise typer.Exit(code=1)

    if not folder.is_dir():
        print(f"[red]Error:[/red] {folder} is not a directory")
        raise typer.Exit(code=1)

    result = load_bundle(folder, key=state["key"], max_workers=workers)
    if result.layout is None:
        print(f"[red]Error:[/red] No locale files or folders found in {folder}")
        raise typer.Exit(code=1)

    table = Table(title=f"{folder} ({result.layout.name})")
    table.add_column("Locale")
    table.add_column("Name")
    table.add_column("Pages", justify="right")
    table.add_column("Status")
    for outcome in result.outcomes:
        if outcome.ok:
            status = "[green]ok[/green]"
            page_count = str(len(outcome.document.pages))
        else:
            status = f"[red]{escape(str(outcome.error))}[/red]"
            page_count = "-"
        table.add_row(
            outcome.locale_code, locale_name(outcome.locale_code), page_count, status
        )
    print(table)

    failed = len(result.failures)
    if csv_file is not None:
        import_to_bundle(result, csv_file, page_name)
        save_to = save_to or folder

    if save_to is not None:
        save_failures = result.save(save_to)
        for outcome in save_failures:
            error = escape(str(outcome.error))
            print(f"[red]Failed to save {outcome.locale_code}:[/red] {error}")
        failed += len(save_failures)
        saved = len(result.documents) - len(save_failures)
        print(f"Saved {saved} locales to {save_to}")

    if failed:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
