"""
CLI integration for code generation functionality.

Provides the command-line options and handlers of the code generator.
"""

import argparse
from pathlib import Path

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.syntax import Syntax
from rich.table import Table

from ..formats import Registry
from ..utils import RegistryLoaderError, load_registry
from .core.config import ENCODINGS, ConfigError, GeneratorConfig, get_config_manager, load_config
from .core.generator import GenerationResult, generate_code
from .installer import InstallerError, create_installer
from .registry import (
    GeneratorRegistryError,
    get_generator,
    get_language_info,
    get_registry,
    list_all_language_info,
    list_supported_languages,
)


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


# Initialize rich console
console = Console()


def add_codegen_args(parser: argparse.ArgumentParser):
    """Add code generation arguments to an existing CLI parser."""

    parser.add_argument(
        "registry",
        nargs="?",
        help="Registry document (JSON or YAML file, or HTTP(S) URL)",
    )

    generation_group = parser.add_argument_group("code generation")
    generation_group.add_argument(
        "--language",
        "-l",
        help="Target language (use --list-languages to see options)",
    )
    generation_group.add_argument(
        "--encoding",
        choices=ENCODINGS,
        help="Binary encoding variant (default: bincode)",
    )
    generation_group.add_argument(
        "--module-name",
        "--namespace",
        metavar="NAME",
        help="Module/namespace name for generated code",
    )
    generation_group.add_argument(
        "--force-indirect",
        nargs="+",
        metavar="TYPE",
        help="Type names whose references are always heap-indirected",
    )
    generation_group.add_argument(
        "--config", metavar="FILE", help="JSON or YAML configuration file"
    )
    generation_group.add_argument(
        "--no-comments",
        action="store_true",
        help="Don't generate comments in output code",
    )

    output_group = parser.add_argument_group("output")
    destination = output_group.add_mutually_exclusive_group()
    destination.add_argument(
        "--output",
        "-o",
        metavar="FILE",
        help="Output file for generated code (default: stdout)",
    )
    destination.add_argument(
        "--install-dir",
        metavar="DIR",
        help="Install the generated module into a project tree",
    )
    output_group.add_argument(
        "--with-runtime",
        action="store_true",
        help="Also install the runtime support library",
    )

    info_group = parser.add_argument_group("information")
    info_group.add_argument(
        "--list-languages",
        action="store_true",
        help="List supported target languages and exit",
    )
    info_group.add_argument(
        "--language-info",
        metavar="LANGUAGE",
        help="Show detailed information about a specific language",
    )
    info_group.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show debug logging and generation result metadata",
    )


def handle_codegen_command(args: argparse.Namespace) -> int:
    """
    Handle code generation command from CLI arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    try:
        # Handle informational commands first
        if args.list_languages:
            return _list_languages()

        if args.language_info:
            return _show_language_info(args.language_info)

        if not args.language:
            raise CLIError("--language is required for code generation")

        if not args.registry:
            raise CLIError("A registry document (file or URL) is required")

        if not _validate_language(args.language):
            return 1

        language = get_registry().resolve(args.language)
        config = _build_config(args, language)
        registry = _load_input(args.registry)

        if args.install_dir:
            return _install(registry, language, config, args)
        return _generate_and_output(registry, language, config, args)

    except (CLIError, GeneratorRegistryError, InstallerError) as e:
        console.print(f"[red]✗ Error:[/red] {e}")
        return 1


def _list_languages() -> int:
    """List supported languages with details."""
    language_info = list_all_language_info()

    table = Table(title="📋 Supported Languages", box=box.ROUNDED, title_style="bold cyan")

    table.add_column("Language", style="bold green", no_wrap=True)
    table.add_column("Extension", style="cyan")
    table.add_column("Generator Class", style="dim")
    table.add_column("Aliases", style="blue")

    for lang_name, info in sorted(language_info.items()):
        aliases = ", ".join(info["aliases"]) if info["aliases"] else "[dim]none[/dim]"
        table.add_row(f"🔧 {lang_name}", info["file_extension"], info["class"], aliases)

    console.print()
    console.print(table)
    console.print()

    console.print(
        Panel(
            "[bold]Usage:[/bold] serdegen [dim]registry.yaml[/dim] --language [cyan]LANGUAGE[/cyan]\n"
            "[bold]Info:[/bold] serdegen --language-info [cyan]LANGUAGE[/cyan]",
            title="💡 Quick Start",
            border_style="blue",
        )
    )
    return 0


def _show_language_info(language: str) -> int:
    """Show detailed information about a specific language."""
    if not _validate_language(language, silent=True):
        console.print(f"[red]✗ Language '{language}' is not supported[/red]")
        console.print("[dim]Use --list-languages to see available options[/dim]")
        return 1

    info = get_language_info(language)

    info_text = f"""[bold]Language:[/bold] {info['name']}
[bold]File Extension:[/bold] {info['file_extension']}
[bold]Generator Class:[/bold] {info['class']}
[bold]Module:[/bold] {info['module']}"""

    if info["aliases"]:
        info_text += f"\n[bold]Aliases:[/bold] {', '.join(info['aliases'])}"

    console.print()
    console.print(
        Panel(info_text, title=f"🔧 {info['name'].title()} Generator", border_style="green")
    )

    generator = get_generator(language)
    config_table = Table(
        title="⚙️  Default Configuration",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
    )
    config_table.add_column("Setting", style="bold")
    config_table.add_column("Value", style="green")

    config_table.add_row("Module Name", str(generator.config.module_name))
    config_table.add_row("Encoding", str(generator.config.encoding))
    config_table.add_row("Runtime Module", str(generator.config.runtime_module))
    config_table.add_row("Indent Size", str(generator.config.indent_size))
    config_table.add_row("Add Comments", str(generator.config.add_comments))

    console.print()
    console.print(config_table)

    examples_text = f"""Generate to stdout:
[cyan]serdegen registry.yaml --language {language}[/cyan]

Generate to file:
[cyan]serdegen registry.yaml -l {language} -o output{info['file_extension']}[/cyan]

Canonical encoding with the runtime installed:
[cyan]serdegen registry.yaml -l {language} --encoding canonical --install-dir out --with-runtime[/cyan]"""

    console.print()
    console.print(Panel(examples_text, title="💡 Usage Examples", border_style="blue"))
    return 0


def _validate_language(language: str, silent: bool = False) -> bool:
    """Validate that a language (or alias) is supported."""
    if get_registry().is_supported(language):
        return True
    if not silent:
        supported = list_supported_languages()
        console.print(f"[red]✗ Unsupported language '{language}'[/red]")
        console.print(f"[dim]Supported languages: {', '.join(supported)}[/dim]")
    return False


def _load_input(source: str) -> Registry:
    """Load the registry from a file or URL."""
    try:
        description, registry = load_registry(source)
    except FileNotFoundError as e:
        raise CLIError(str(e)) from e
    except RegistryLoaderError as e:
        raise CLIError(f"Failed to load registry: {e}") from e

    console.print(f"Loaded: {description} ({len(registry)} types)")
    return registry


def _build_config(args: argparse.Namespace, language: str) -> GeneratorConfig:
    """Build configuration from the config file and CLI arguments."""
    overrides = {}

    if args.module_name:
        overrides["module_name"] = args.module_name

    if args.encoding:
        overrides["encoding"] = args.encoding

    if args.force_indirect:
        overrides["force_indirect"] = list(args.force_indirect)

    if args.no_comments:
        overrides["add_comments"] = False

    try:
        config = load_config(language, custom_config=overrides, config_file=args.config)
    except ConfigError as e:
        raise CLIError(f"Configuration error: {e}") from e

    problems = get_config_manager().validate_config(config, language)
    if problems:
        raise CLIError("Invalid configuration: " + "; ".join(problems))
    return config


def _generate(registry: Registry, language: str, config: GeneratorConfig) -> GenerationResult:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(f"[green]Generating {language} code...", total=None)
        result = generate_code(get_generator(language, config), registry)
        progress.remove_task(task)
    return result


def _generate_and_output(
    registry: Registry, language: str, config: GeneratorConfig, args: argparse.Namespace
) -> int:
    """Generate code and handle output with rich formatting."""
    result = _generate(registry, language, config)

    if not result.success:
        console.print(f"[red]✗ Code generation failed:[/red] {result.error_message}")
        return 1

    if args.output:
        output_path = Path(args.output)
        try:
            output_path.write_text(result.code, encoding="utf-8")
        except OSError as e:
            console.print(f"[red]✗ Failed to write to {output_path}:[/red] {e}")
            return 1
        console.print(
            f"[green]✓[/green] Generated {language} code saved to [cyan]{output_path}[/cyan]"
        )
        if args.with_runtime:
            installer = create_installer(language, output_path.parent)
            runtime = _install_runtime(installer, config)
            console.print(f"[green]✓[/green] Runtime installed at [cyan]{runtime}[/cyan]")
    else:
        top_border = "═" * 40
        console.print(
            f"[green]{top_border} 📄 Generated {language.title()} Code {top_border}[/green]\n"
        )
        console.print(Syntax(result.code, language, theme="monokai"))
        console.print(f"\n[green]{top_border}{top_border}{top_border}[/green]")

    _print_details(result, args)
    return 0


def _install(
    registry: Registry, language: str, config: GeneratorConfig, args: argparse.Namespace
) -> int:
    """Install the generated module (and optionally the runtime)."""
    overrides = {
        "encoding": config.encoding,
        "force_indirect": list(config.force_indirect),
        "runtime_module": config.runtime_module,
        "indent_size": config.indent_size,
        "add_comments": config.add_comments,
        **config.custom,
    }
    installer = create_installer(language, args.install_dir, overrides)

    if args.with_runtime:
        runtime = _install_runtime(installer, config)
        console.print(f"[green]✓[/green] Runtime installed at [cyan]{runtime}[/cyan]")

    path = installer.install_module(config.module_name, registry)
    console.print(f"[green]✓[/green] Module {config.module_name} installed at [cyan]{path}[/cyan]")
    return 0


def _install_runtime(installer, config: GeneratorConfig) -> Path:
    if config.encoding == "canonical":
        return installer.install_canonical_runtime()
    return installer.install_bincode_runtime()


def _print_details(result: GenerationResult, args: argparse.Namespace):
    """Show metadata (verbose only) and warnings."""
    if args.verbose and result.metadata:
        metadata_table = Table(
            title="📊 Generation Metadata",
            box=box.SIMPLE,
            show_header=True,
            header_style="bold cyan",
        )
        metadata_table.add_column("Property", style="bold")
        metadata_table.add_column("Value", style="green")

        for key, value in result.metadata.items():
            metadata_table.add_row(key.replace("_", " ").title(), str(value))

        console.print()
        console.print(metadata_table)

    if result.warnings:
        console.print("\n[yellow]⚠️  Warnings:[/yellow]")
        for warning in result.warnings:
            console.print(f"  [yellow]•[/yellow] {warning}")
        console.print()
