"""
SQL Dialect Converter — Converts SQL schema text between MySQL, PostgreSQL and
SQLite with ordered text rewrites and data-type lookup tables.

Usage:
    python sql_converter.py --source mysql --target postgres --inline "CREATE TABLE t (id INT AUTO_INCREMENT PRIMARY KEY)"
    python sql_converter.py -s mysql -t postgres --input schema.sql
    python sql_converter.py -s pg -t sqlite --input schema.sql --output schema_lite.sql
    python sql_converter.py --interactive
    python sql_converter.py --list-dialects
"""

import os
import sys
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from conversion_pipeline import build_pipeline, run_pipeline
from dialects import (
    DIALECTS, aliases_for, normalize_dialect, pair_key, resolve_dialect, supported_dialects,
)
from type_dictionary import TypeDictionary, load_mappings_file

__version__ = "1.0.0"

console = Console()
logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

MAX_INPUT_SIZE = 10_000_000  # 10MB


class ConversionError(Exception):
    """Raised when a conversion is requested to fail loudly and errors were recorded."""


# ═══════════════════════════════════════════════════════════════════════
#  Conversion session
# ═══════════════════════════════════════════════════════════════════════

class SQLConverter:
    """
    One conversion request: input text, source/target dialects, and the
    errors and warnings collected while converting.

    Not safe for concurrent use; give each caller its own instance.
    """

    def __init__(
        self,
        sql: str = "",
        source_dialect: str = "mysql",
        target_dialect: str = "postgres",
        dictionary: Optional[TypeDictionary] = None,
    ):
        self.sql = "" if sql is None else str(sql)
        self.source_dialect = normalize_dialect(source_dialect)
        self.target_dialect = normalize_dialect(target_dialect)
        self.dictionary = dictionary if dictionary is not None else TypeDictionary()
        self.output: Optional[str] = None
        self.errors: List[str] = []
        self.warnings: List[str] = []

    @staticmethod
    def supported_dialects() -> List[str]:
        return supported_dialects()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def convert(self) -> Optional[str]:
        """
        Run validation and the dialect pipeline.

        Returns the converted SQL, or None when any error was recorded. Never
        raises for invalid input; check ``errors`` instead.
        """
        self.output = None
        self.errors = []
        self.warnings = []

        self._validate_input()
        self._validate_dialects()
        if self.errors:
            logger.warning(f"Conversion rejected: {'; '.join(self.errors)}")
            return None

        label = pair_key(self.source_dialect, self.target_dialect)
        try:
            passes = build_pipeline(self.source_dialect, self.target_dialect, self.dictionary)
            if passes is None:
                self.warnings.append(
                    f"Conversion from {self.source_dialect} to {self.target_dialect} not implemented"
                )
                output = self.sql
            else:
                output = run_pipeline(self.sql, passes, label)
        except Exception as e:
            logger.exception(f"[{label}] Pass failed")
            self.errors.append(f"Conversion error: {e}")
            return None

        for warning in self.warnings:
            logger.warning(warning)

        self.output = output
        return output

    def convert_or_fail(self) -> str:
        result = self.convert()
        if not self.is_valid:
            raise ConversionError(", ".join(self.errors))
        return result

    def _validate_input(self) -> None:
        if not self.sql.strip():
            self.errors.append("SQL input cannot be empty")
        elif len(self.sql) > MAX_INPUT_SIZE:
            self.errors.append("SQL input is too large (max 10MB)")

    def _validate_dialects(self) -> None:
        supported = ", ".join(DIALECTS)
        for role, dialect in (("Source", self.source_dialect), ("Target", self.target_dialect)):
            if not dialect:
                self.errors.append(f"{role} dialect cannot be empty")
            elif dialect not in DIALECTS:
                self.errors.append(f"Invalid {role.lower()} dialect: '{dialect}'. Supported: {supported}")

        if self.source_dialect and self.source_dialect == self.target_dialect:
            self.warnings.append("Source and target dialects are identical - no conversion needed")


def convert_sql(
    sql: str,
    source_dialect: str,
    target_dialect: str,
    dictionary: Optional[TypeDictionary] = None,
) -> str:
    """Convert a string in one call. Raises ConversionError on failure."""
    return SQLConverter(sql, source_dialect, target_dialect, dictionary).convert_or_fail()


# ═══════════════════════════════════════════════════════════════════════
#  File conversion
# ═══════════════════════════════════════════════════════════════════════

def derive_output_path(input_path: Path, target_dialect: str) -> Path:
    """``schema.sql`` → ``schema_postgres.sql`` next to the input file."""
    extension = input_path.suffix or ".sql"
    return input_path.with_name(f"{input_path.stem}_{target_dialect}{extension}")


def convert_file(
    input_path: str,
    source_dialect: str,
    target_dialect: str,
    output_path: Optional[str] = None,
    dictionary: Optional[TypeDictionary] = None,
) -> Dict[str, Any]:
    """
    Convert an SQL file and write the result.

    Returns a summary dict with paths, byte sizes and warnings. Raises
    FileNotFoundError or ValueError for file problems and ConversionError when
    the conversion itself fails.
    """
    source_file = Path(input_path)
    warnings: List[str] = []

    if not source_file.exists():
        raise FileNotFoundError(f"File '{input_path}' not found")
    if not source_file.is_file() or not os.access(source_file, os.R_OK):
        raise ValueError(f"File '{input_path}' is not readable")

    file_size = source_file.stat().st_size
    if file_size > MAX_INPUT_SIZE:
        raise ValueError(f"File is too large ({file_size // 1_000_000}MB). Maximum is 10MB")
    if file_size == 0:
        raise ValueError("File is empty")

    try:
        sql = source_file.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        sql = source_file.read_text(encoding="latin-1")
        warnings.append("File contains non-UTF8 characters")

    converter = SQLConverter(sql, source_dialect, target_dialect, dictionary)
    result = converter.convert_or_fail()

    target_file = Path(output_path) if output_path else derive_output_path(
        source_file, converter.target_dialect
    )
    if not target_file.parent.is_dir():
        raise ValueError(f"Output directory '{target_file.parent}' does not exist")
    if target_file.exists():
        warnings.append(f"Overwriting existing file '{target_file}'")

    with open(target_file, "w", encoding="utf-8") as f:
        f.write(result)

    logger.info(f"Converted {source_file} ({converter.source_dialect}) → {target_file} ({converter.target_dialect})")

    return {
        "input_path": str(source_file),
        "output_path": str(target_file),
        "input_bytes": file_size,
        "output_bytes": len(result.encode("utf-8")),
        "source": converter.source_dialect,
        "target": converter.target_dialect,
        "warnings": warnings + converter.warnings,
    }


# ═══════════════════════════════════════════════════════════════════════
#  Console helpers
# ═══════════════════════════════════════════════════════════════════════

EXIT_COMMANDS = {"exit", "quit", "q"}


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/red] {escape(message)}", soft_wrap=True)
    sys.exit(1)


def _print_warnings(warnings: List[str]) -> None:
    for warning in warnings:
        console.print(f"[yellow]Warning:[/yellow] {escape(warning)}", soft_wrap=True)


def _print_conversion(converter: SQLConverter, result: Optional[str]) -> None:
    if converter.is_valid:
        console.print("[bold green]=== Results ===[/bold green]")
        console.print(result, markup=False, highlight=False, soft_wrap=True)
        _print_warnings(converter.warnings)
    else:
        console.print("[bold red]=== Failure ===[/bold red]")
        for error in converter.errors:
            console.print(f"[red]Error:[/red] {escape(error)}", soft_wrap=True)


def _print_dialects() -> None:
    console.print("[bold]Supported dialects:[/bold]")
    for dialect in supported_dialects():
        aliases = aliases_for(dialect)
        suffix = f" (aliases: {', '.join(aliases)})" if aliases else ""
        console.print(f"  - {dialect}{suffix}")


def _print_type_table(pair: str, dictionary: TypeDictionary) -> None:
    custom = dictionary.custom_mappings(pair)
    table = Table(title=f"Type mappings: {pair}")
    table.add_column("Source type", style="cyan")
    table.add_column("Target type")
    table.add_column("Origin", justify="center")

    for source_type, target_type in dictionary.lookup(pair).items():
        origin = "[yellow]custom[/yellow]" if source_type in custom else "base"
        table.add_row(source_type, escape(target_type) or "[dim](removed)[/dim]", origin)

    console.print(table)


def _resolve_pair(source: Optional[str], target: Optional[str]) -> str:
    """Pair identifier for two dialect names; exits with an error if they name no pipeline."""
    if not source or not target:
        _fail("Both --source and --target are required")
    resolved_source, resolved_target = resolve_dialect(source), resolve_dialect(target)
    if resolved_source is None or resolved_target is None:
        _fail(f"Unsupported dialect. Supported: {', '.join(DIALECTS)}")
    if resolved_source == resolved_target:
        _fail("Source and target dialects are identical - no type mappings apply")
    return pair_key(resolved_source, resolved_target)


def _ask(text: str, prompt_suffix: str = ": ") -> Optional[str]:
    """Read one stripped line; None on EOF or Ctrl+C."""
    try:
        return click.prompt(text, default="", show_default=False, prompt_suffix=prompt_suffix).strip()
    except click.Abort:
        return None


def _handle_interactive_command(value: str) -> bool:
    command = value.lower()
    if command in ("help", "?"):
        console.print(
            "\n[bold]Interactive commands:[/bold]\n"
            "  help, ?      Show this help\n"
            "  dialects     List supported dialects\n"
            "  exit, quit   Exit interactive mode\n\n"
            "Enter SQL line by line; finish with an empty line or 'END'.\n"
        )
        return True
    if command in ("dialects", "list"):
        _print_dialects()
        return True
    return False


def interactive_mode(dictionary: TypeDictionary) -> None:
    """Prompt for dialects and SQL until the user exits."""
    console.print("[bold]SQL Converter - interactive mode[/bold]")
    console.print("Type 'exit' to quit, 'help' for commands")
    console.print("-" * 40)

    while True:
        source = _ask("\nSource dialect (mysql/postgres/sqlite)")
        if source is None or source.lower() in EXIT_COMMANDS:
            break
        if _handle_interactive_command(source) or not source:
            continue

        target = _ask("Target dialect (mysql/postgres/sqlite)")
        if target is None or target.lower() in EXIT_COMMANDS:
            break
        if _handle_interactive_command(target) or not target:
            continue

        console.print("Enter your SQL (end with an empty line or 'END'):")
        sql_lines = []
        while True:
            line = _ask("", prompt_suffix="")
            if not line or line.upper() == "END" or line.lower() in EXIT_COMMANDS:
                break
            sql_lines.append(line)

        sql = "\n".join(sql_lines)
        if not sql.strip():
            console.print("[yellow]No SQL entered, skipping...[/yellow]")
            continue

        converter = SQLConverter(sql, source, target, dictionary)
        _print_conversion(converter, converter.convert())
        console.print("-" * 40)

    console.print("\nGoodbye!")


# ═══════════════════════════════════════════════════════════════════════
#  CLI
# ═══════════════════════════════════════════════════════════════════════

@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--source", "-s", help="Source dialect (mysql, postgres, sqlite or an alias)")
@click.option("--target", "-t", help="Target dialect (mysql, postgres, sqlite or an alias)")
@click.option("--inline", "-c", help="Convert an SQL string directly")
@click.option("--input", "-i", "input_path", help="Path to the SQL file to convert")
@click.option("--output", "-o", "output_path",
              help="Output file (default: <input>_<target>.sql next to the input)")
@click.option("--interactive", is_flag=True, help="Prompt for dialects and SQL")
@click.option("--list-dialects", "-l", is_flag=True, help="List supported dialects and aliases")
@click.option("--list-types", is_flag=True, help="Show the type mapping table for --source/--target")
@click.option("--check-type", metavar="TYPE", help="Report whether a type is known to the mapping tables")
@click.option("--map", "type_maps", multiple=True, metavar="SOURCE=TARGET",
              help="Custom type mapping for the --source/--target pair (repeatable)")
@click.option("--mappings", "mappings_path", help="JSON file of custom type mappings per pair")
@click.option("--verbose", is_flag=True, help="Log every rule applied")
@click.option("--quiet", "-q", is_flag=True, help="Only log warnings and errors")
@click.version_option(__version__, "--version", "-v", prog_name="sqlconvert")
@click.pass_context
def main(ctx, source: str, target: str, inline: str, input_path: str, output_path: str,
         interactive: bool, list_dialects: bool, list_types: bool, check_type: str,
         type_maps: tuple, mappings_path: str, verbose: bool, quiet: bool):
    """Convert SQL schema text between MySQL, PostgreSQL and SQLite."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif quiet:
        logging.getLogger().setLevel(logging.WARNING)

    dictionary = TypeDictionary()

    if mappings_path:
        try:
            dictionary.load_custom_mappings(load_mappings_file(mappings_path))
        except (OSError, ValueError) as e:
            _fail(f"Failed to load mappings: {e}")

    if list_dialects:
        _print_dialects()
        return

    if check_type:
        if dictionary.type_exists(check_type):
            console.print(f"[green]{escape(check_type.upper())}[/green] is a known type")
        else:
            console.print(f"[yellow]{escape(check_type.upper())}[/yellow] is not in the mapping tables")
        return

    if type_maps:
        pair = _resolve_pair(source, target)
        for entry in type_maps:
            source_type, sep, target_type = entry.partition("=")
            if not sep:
                _fail(f"Invalid --map '{entry}', expected SOURCE=TARGET")
            try:
                dictionary.add_custom_mapping(pair, source_type, target_type)
            except ValueError as e:
                _fail(str(e))

    if list_types:
        _print_type_table(_resolve_pair(source, target), dictionary)
        return

    if interactive:
        interactive_mode(dictionary)
        return

    if inline is not None:
        if not inline.strip():
            _fail("SQL string cannot be empty")
        converter = SQLConverter(inline, source, target, dictionary)
        _print_conversion(converter, converter.convert())
        if not converter.is_valid:
            sys.exit(1)
        return

    if input_path:
        try:
            summary = convert_file(input_path, source, target, output_path, dictionary)
        except (OSError, ValueError) as e:
            _fail(str(e))
        except ConversionError as e:
            console.print("[bold red]=== Failure ===[/bold red]")
            _fail(str(e))

        console.print(f"[green]Conversion successful:[/green] {escape(summary['output_path'])}",
                      soft_wrap=True)
        console.print(f"   {summary['source']} → {summary['target']}: "
                      f"{summary['input_bytes']} bytes → {summary['output_bytes']} bytes")
        _print_warnings(summary["warnings"])
        return

    click.echo(ctx.get_help())


if __name__ == "__main__":
    main()
