"""
emuident CLI - identificação de imagens de disco por assinatura e serial.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from .common.exceptions import EmuIdentError
from .common.stream import open_stream
from .config import SETTINGS_DEFAULT, SYSTEM_DISPLAY_NAMES
from .core.config_manager import ConfigManager
from .core.detector import MAGIC_NUMBERS
from .core.identifier import container_for, scan_files
from .logging_cfg import configure_logging
from .playlist.cue import locate_cue_track, next_cue_file
from .playlist.gdi import locate_gdi_track, next_gdi_file

app = typer.Typer(
    help="💿 emuident: identificação de imagens de disco (CUE/GDI/ISO/BIN) por assinatura e serial.",
    rich_markup_mode="rich",
    add_completion=False,
)
console = Console()

state: dict = {"config": None}


def _settings() -> ConfigManager:
    if state["config"] is None:
        state["config"] = ConfigManager(SETTINGS_DEFAULT)
    return state["config"]


@app.callback()
def global_options(
    config_file: Path = typer.Option(Path(SETTINGS_DEFAULT), "--config", help="Ficheiro de configurações JSON."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Mostra mensagens de depuração."),
    log_format: Optional[str] = typer.Option(None, "--log-format", help="auto | json | human"),
):
    cfg = ConfigManager(config_file)
    state["config"] = cfg
    configure_logging(
        log_format or cfg.get("log_format", "auto"),
        level=logging.DEBUG if verbose else cfg.log_level(),
        log_dir=cfg.log_dir(),
    )


@app.command("identify")
def cmd_identify(
    paths: List[Path] = typer.Argument(..., help="Imagens ou playlists a identificar."),
    as_json: bool = typer.Option(False, "--json", help="Uma linha JSON por ficheiro."),
    all_tracks: bool = typer.Option(False, "--all-tracks", help="Escolhe a maior faixa de dados em vez da primeira."),
    no_fallback: bool = typer.Option(False, "--no-fallback", help="Desativa a procura genérica de serial ASCII."),
):
    """
    [bold magenta]🔍 Identificar[/bold magenta]

    Localiza a faixa de dados, deteta a consola pelos números mágicos e
    extrai o serial normalizado (convenção redump).
    """
    cfg = _settings()
    first_track = False if all_tracks else bool(cfg.get("first_track", True))
    ascii_fallback = False if no_fallback else bool(cfg.get("ascii_fallback", True))

    if as_json:
        results = scan_files(paths, first_track=first_track, ascii_fallback=ascii_fallback)
        for r in results:
            typer.echo(json.dumps(r.to_dict(), ensure_ascii=False))
    else:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("A identificar...", total=100)

            def prog_wrapper(p, m):
                progress.update(task, completed=p * 100, description=f"A identificar: {m}")

            results = scan_files(
                paths, first_track=first_track, ascii_fallback=ascii_fallback, progress_cb=prog_wrapper
            )

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Ficheiro")
        table.add_column("Sistema")
        table.add_column("Serial", style="bold")
        table.add_column("Faixa", style="dim")
        for r in results:
            system = SYSTEM_DISPLAY_NAMES.get(r.system, r.system) if r.system else "-"
            if r.error:
                serial = f"[red]✘ {escape(r.error)}[/red]"
            else:
                serial = escape(r.serial) if r.serial else "[yellow]desconhecido[/yellow]"
            table.add_row(escape(Path(r.path).name), system, serial, escape(r.track_path or ""))
        console.print(table)

    if any(r.error for r in results):
        raise typer.Exit(code=1)


@app.command("locate")
def cmd_locate(
    path: Path = typer.Argument(..., help="Ficheiro .cue ou .gdi."),
    first: bool = typer.Option(False, "--first", help="Aceita a primeira faixa de dados encontrada."),
):
    """
    [bold blue]📍 Localizar faixa de dados[/bold blue]

    Mostra o ficheiro (e, para CUE, o offset e tamanho em bytes) da faixa de
    dados selecionada.
    """
    container = container_for(path)
    try:
        if container == "cue":
            track = locate_cue_track(path, first=first)
            console.print(f"{escape(str(track.path))}\toffset={track.offset}\tsize={track.size}")
        elif container == "gdi":
            console.print(escape(str(locate_gdi_track(path, first=first))))
        else:
            console.print(f"[bold red]✘[/bold red] Não é uma playlist: {escape(str(path))}")
            raise typer.Exit(code=2)
    except EmuIdentError as e:
        console.print(f"[bold red]✘[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)


@app.command("tracks")
def cmd_tracks(
    path: Path = typer.Argument(..., help="Ficheiro .cue ou .gdi."),
):
    """
    [bold white]📜 Listar ficheiros de faixa[/bold white]

    Enumera os ficheiros referidos pela playlist, pela ordem em que aparecem.
    """
    container = container_for(path)
    if container == "cue":
        step = next_cue_file
    elif container == "gdi":
        step = next_gdi_file
    else:
        console.print(f"[bold red]✘[/bold red] Não é uma playlist: {escape(str(path))}")
        raise typer.Exit(code=2)

    try:
        with open_stream(path) as fp:
            while True:
                track_path = step(fp, path)
                if track_path is None:
                    break
                console.print(escape(str(track_path)))
    except EmuIdentError as e:
        console.print(f"[bold red]✘[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)


@app.command("systems")
def cmd_systems():
    """
    [bold green]🧬 Números mágicos[/bold green]

    Lista a tabela de assinaturas pela ordem em que é consultada.
    """
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Sistema")
    table.add_column("Offset", justify="right")
    table.add_column("Magic")
    for entry in MAGIC_NUMBERS:
        table.add_row(
            f"{entry.system_name} ({SYSTEM_DISPLAY_NAMES.get(entry.system_name, '?')})",
            f"0x{entry.offset:06X}",
            entry.magic.hex(" ").upper(),
        )
    console.print(table)


def main():
    app()


if __name__ == "__main__":
    main()
