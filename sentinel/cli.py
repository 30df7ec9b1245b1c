#!/usr/bin/env python3
"""
Sentinel CLI Interface
Command-line interface for the Sentinel contract analyzer
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from sentinel import ADVISORY_NOTICE
from sentinel.core.analyzer import ContractAnalyzer
from sentinel.core.config import SentinelConfig
from sentinel.core.errors import SentinelError
from sentinel.core.gemini import GeminiClient
from sentinel.core.history import HistoryStore
from sentinel.core.model import AnalysisResult, AnalysisState, VulnerabilityFinding
from sentinel.core.proxy import ProxyService, RemoteProxy
from sentinel.core.session import AnalysisSession
from sentinel.core.sui import fetch_package_code
from sentinel.data.demo_contracts import DEMO_CONTRACTS, get_demo
from sentinel.utils.logger import setup_logger
from sentinel.utils.report import ReportGenerator, findings_table

app = typer.Typer(
    name="sentinel",
    help="Sentinel - LLM-assisted security review for Sui Move smart contracts",
    no_args_is_help=True
)

console = Console()

DEFAULT_HISTORY_FILE = ".sentinel/history.json"

SEVERITY_STYLES = {
    "Critical": "bold red",
    "High": "dark_orange",
    "Medium": "yellow",
    "Low": "blue",
}


def load_config(env_file: Optional[str]) -> SentinelConfig:
    try:
        config = SentinelConfig.from_env(env_file)
    except SentinelError as e:
        console.print(f"[red]ERROR: {escape(e.message)}: {escape(getattr(e, 'detail', ''))}[/red]")
        raise typer.Exit(1)
    if not config.history_file:
        config = config.with_overrides(history_file=DEFAULT_HISTORY_FILE)
    return config


def make_backend(config: SentinelConfig, remote: Optional[str]):
    """Talk to a running proxy server when ``remote`` is given, else proxy in-process."""
    if remote:
        return RemoteProxy(remote, timeout=config.timeout)
    return ProxyService(config)


def read_source(file: Optional[str], demo: Optional[str]) -> str:
    if demo:
        try:
            return get_demo(demo).code
        except KeyError as e:
            console.print(f"[red]ERROR: {e.args[0]}[/red]")
            raise typer.Exit(1)
    if not file:
        console.print("[red]ERROR: Provide a contract FILE, '-' for stdin, --demo or --package[/red]")
        raise typer.Exit(1)
    if file == "-":
        return sys.stdin.read()
    try:
        return Path(file).read_text(encoding="utf-8")
    except OSError as e:
        console.print(f"[red]ERROR: Could not read {file}: {e}[/red]")
        raise typer.Exit(1)


def score_style(score: int) -> str:
    if score >= 80:
        return "bold green"
    if score >= 50:
        return "bold yellow"
    return "bold red"


def render_result(result: AnalysisResult, plain: bool = False) -> None:
    """Print score, findings, diagram and recommendations.

    ``plain`` prints a tabulate findings table with no styling, for piping.
    """
    if plain:
        console.print(f"Score: {result.score}/100", markup=False, highlight=False, soft_wrap=True)
        console.print(result.summary, markup=False, highlight=False, soft_wrap=True)
        console.print(findings_table(result), markup=False, highlight=False, soft_wrap=True)
        for item in result.recommendations:
            console.print(f"- {item}", markup=False, highlight=False, soft_wrap=True)
        return

    # Model text is wrapped in Text so brackets are not read as rich markup
    console.print(Panel(
        Text(f"{result.score}/100", style=score_style(result.score), justify="center"),
        title="Security Score",
        border_style=score_style(result.score).split()[-1],
    ))
    if result.summary:
        console.print(Panel(Text(result.summary), title="Summary", border_style="cyan"))

    if result.vulnerabilities:
        table = Table(title=f"Findings ({len(result.vulnerabilities)})", show_lines=True)
        table.add_column("#", justify="right")
        table.add_column("Severity")
        table.add_column("Title")
        table.add_column("Location")
        table.add_column("Confidence")
        for index, finding in enumerate(result.vulnerabilities, start=1):
            table.add_row(
                str(index),
                Text(finding.severity, style=SEVERITY_STYLES.get(finding.severity, "white")),
                Text(finding.title or finding.type),
                Text(finding.location),
                Text(finding.confidence),
            )
        console.print(table)

        for index, finding in enumerate(result.vulnerabilities, start=1):
            body = Text(finding.description)
            if finding.fix:
                body.append("\n\nFix:\n", style="green")
                body.append(finding.fix)
            console.print(Panel(
                body,
                title=Text(f"#{index} {finding.title or finding.type}"),
                border_style=SEVERITY_STYLES.get(finding.severity, "white").split()[-1],
            ))
    else:
        console.print("[green]No vulnerabilities reported.[/green]")

    if result.attack_diagram:
        console.print(Panel(Text(result.attack_diagram), title="Attack Flow (Mermaid)", border_style="magenta"))

    if result.recommendations:
        console.print("[cyan]Recommendations:[/cyan]")
        for item in result.recommendations:
            console.print(Text(f"  • {item}"))


@app.command()
def analyze(
    file: Optional[str] = typer.Argument(
        None, help="Contract source file ('-' reads stdin)"
    ),
    package: Optional[str] = typer.Option(
        None, "--package", "-p",
        help="Analyze an on-chain Move package by ID instead of a file"
    ),
    demo: Optional[str] = typer.Option(
        None, "--demo", "-d",
        help="Analyze a bundled demo contract (see 'sentinel demos')"
    ),
    remote: Optional[str] = typer.Option(
        None, "--remote", "-r",
        help="Base URL of a running 'sentinel serve' proxy"
    ),
    output_dir: Optional[str] = typer.Option(
        None, "--output-dir", "-o",
        help="Export the JSON report into this directory"
    ),
    html: bool = typer.Option(
        False, "--html",
        help="Also write an HTML report (requires --output-dir)"
    ),
    plain: bool = typer.Option(
        False, "--plain",
        help="Print a plain-text findings table instead of rich panels"
    ),
    env_file: Optional[str] = typer.Option(
        None, "--env-file",
        help="dotenv file holding GEMINI_API_KEY (default: .env.local, .env)"
    ),
    verbose: int = typer.Option(
        1, "--verbose", "-v",
        help="Verbosity level: 0=minimal, 1=standard, 2=debug"
    )
):
    """Analyze a Sui Move contract for security vulnerabilities."""
    setup_logger(verbose)
    config = load_config(env_file)
    backend = make_backend(config, remote)
    session = AnalysisSession(
        ContractAnalyzer(backend),
        HistoryStore(config.history_file, config.history_limit),
    )

    source = None if package else read_source(file, demo)

    async def run() -> str:
        async with backend:
            code = source if source is not None else await fetch_package_code(backend, package)
            await session.analyze(code)
            return code

    try:
        with console.status("Analyzing contract..."):
            code = asyncio.run(run())
    except SentinelError as e:
        console.print(f"[red]ERROR: {escape(e.message)}[/red]")
        raise typer.Exit(1)

    if session.state == AnalysisState.ERROR:
        console.print(f"[red]Analysis failed: {escape(session.error_message)}[/red]")
        raise typer.Exit(1)

    console.print(Panel(ADVISORY_NOTICE.strip(), border_style="yellow"))
    render_result(session.results, plain=plain)

    if output_dir:
        console.print(f"[green]Report exported: {session.export_report(output_dir)}[/green]")
        if html:
            reports = ReportGenerator(output_dir)
            console.print(f"[green]HTML report: {reports.generate_html_report(session.results, code)}[/green]")


@app.command("fetch-package")
def fetch_package(
    package_id: str = typer.Argument(..., help="Move package object ID (0x...)"),
    output: Optional[str] = typer.Option(
        None, "--output", "-o",
        help="Write the disassembly to this file instead of stdout"
    ),
    remote: Optional[str] = typer.Option(None, "--remote", "-r", help="Base URL of a running proxy"),
    env_file: Optional[str] = typer.Option(None, "--env-file", help="dotenv file to load"),
    verbose: int = typer.Option(1, "--verbose", "-v", help="Verbosity level")
):
    """Fetch the disassembly of an on-chain Move package."""
    setup_logger(verbose)
    config = load_config(env_file)
    backend = make_backend(config, remote)

    async def run() -> str:
        async with backend:
            return await fetch_package_code(backend, package_id)

    try:
        code = asyncio.run(run())
    except SentinelError as e:
        console.print(f"[red]ERROR: {escape(e.message)}[/red]")
        raise typer.Exit(1)

    if output:
        Path(output).write_text(code, encoding="utf-8")
        console.print(f"[green]Package code saved to: {output}[/green]")
    else:
        console.print(code, markup=False, highlight=False)


@app.command()
def fix(
    report: str = typer.Argument(..., help="Exported JSON report"),
    index: int = typer.Option(1, "--index", "-i", help="1-based finding number in the report"),
    remote: Optional[str] = typer.Option(None, "--remote", "-r", help="Base URL of a running proxy"),
    env_file: Optional[str] = typer.Option(None, "--env-file", help="dotenv file to load"),
    verbose: int = typer.Option(1, "--verbose", "-v", help="Verbosity level")
):
    """Ask the model for a corrected version of one reported finding."""
    setup_logger(verbose)
    try:
        with open(report, 'r', encoding='utf-8') as f:
            findings = json.load(f).get("vulnerabilities") or []
    except (OSError, ValueError) as e:
        console.print(f"[red]ERROR: Could not read report {report}: {e}[/red]")
        raise typer.Exit(1)

    if not 1 <= index <= len(findings):
        console.print(f"[red]ERROR: Report has {len(findings)} findings; --index {index} is out of range[/red]")
        raise typer.Exit(1)

    finding = VulnerabilityFinding.from_dict(findings[index - 1])
    config = load_config(env_file)
    backend = make_backend(config, remote)

    async def run():
        async with backend:
            return await ContractAnalyzer(backend).generate_fix(finding)

    try:
        with console.status("Generating fix..."):
            suggestion = asyncio.run(run())
    except SentinelError as e:
        console.print(f"[red]ERROR: {escape(e.message)}[/red]")
        raise typer.Exit(1)

    console.print(Panel(
        Text(suggestion.fixed_code),
        title=Text(f"Fixed code: {finding.title or finding.type}"),
        border_style="green",
    ))
    if suggestion.explanation:
        console.print(Panel(Text(suggestion.explanation), title="Explanation", border_style="cyan"))
    if suggestion.additional_notes:
        console.print(Panel(Text(suggestion.additional_notes), title="Additional notes", border_style="yellow"))


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int = typer.Option(3000, "--port", help="Port to listen on"),
    env_file: Optional[str] = typer.Option(None, "--env-file", help="dotenv file to load"),
    debug: bool = typer.Option(False, "--debug", help="Enable Flask debug mode"),
    verbose: int = typer.Option(1, "--verbose", "-v", help="Verbosity level")
):
    """Run the analysis proxy server."""
    from sentinel.server import create_app

    setup_logger(verbose)
    config = load_config(env_file)
    if not config.has_credential:
        console.print("[yellow]WARNING: GEMINI_API_KEY is not set; analysis requests will fail[/yellow]")

    console.print(f"[green]Sentinel proxy listening on http://{host}:{port}[/green]")
    create_app(config).run(host=host, port=port, debug=debug)


@app.command("list-models")
def list_models(
    env_file: Optional[str] = typer.Option(None, "--env-file", help="dotenv file to load"),
    verbose: int = typer.Option(1, "--verbose", "-v", help="Verbosity level")
):
    """List the Gemini models available to the configured key."""
    setup_logger(verbose)
    config = load_config(env_file)

    async def run():
        async with GeminiClient(config) as client:
            return await client.list_models()

    try:
        models = asyncio.run(run())
    except SentinelError as e:
        console.print(f"[red]ERROR: {escape(e.message)}[/red]")
        raise typer.Exit(1)

    for name in models:
        marker = "*" if name == config.gemini_model else " "
        console.print(f"{marker} {name}")


@app.command()
def demos():
    """List the bundled demo contracts."""
    table = Table(title="Demo Contracts")
    table.add_column("Key", style="cyan")
    table.add_column("Name")
    table.add_column("Expected issues")
    for key, contract in DEMO_CONTRACTS.items():
        table.add_row(key, contract.name, ", ".join(contract.expected_issues) or "none")
    console.print(table)


@app.command()
def history(
    show: Optional[str] = typer.Option(None, "--show", help="Render the entry with this ID"),
    clear: bool = typer.Option(False, "--clear", help="Delete all saved analyses"),
    plain: bool = typer.Option(False, "--plain", help="Print the shown entry as a plain-text table"),
    env_file: Optional[str] = typer.Option(None, "--env-file", help="dotenv file to load")
):
    """Show, inspect or clear saved analyses."""
    config = load_config(env_file)
    store = HistoryStore(config.history_file, config.history_limit)

    if clear:
        store.clear()
        console.print("[green]History cleared[/green]")
        return

    if show:
        entry = store.get(show)
        if entry is None:
            console.print(f"[red]ERROR: No history entry {show}[/red]")
            raise typer.Exit(1)
        render_result(entry.results, plain=plain)
        return

    if not len(store):
        console.print("No saved analyses.")
        return

    table = Table(title="Recent Analyses")
    table.add_column("ID", style="cyan")
    table.add_column("Time")
    table.add_column("Score", justify="right")
    table.add_column("Findings", justify="right")
    table.add_column("Source")
    for entry in store.entries:
        first_line = next((line.strip() for line in entry.code.splitlines() if line.strip()), "")
        table.add_row(
            entry.id,
            entry.timestamp,
            Text(str(entry.results.score), style=score_style(entry.results.score)),
            str(len(entry.results.vulnerabilities)),
            first_line[:50],
        )
    console.print(table)


def main():
    app()


if __name__ == "__main__":
    main()
