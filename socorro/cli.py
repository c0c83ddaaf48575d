"""Interface de linha de comando para operar o Socorro."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional, Sequence

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from socorro.container import SocorroContainer, build_container
from socorro.logging_config import configure_logging


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Socorro - coordenação de resposta a desastres")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Nível de log: DEBUG, INFO, WARNING, ERROR (padrão LOG_LEVEL ou INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("serve", help="Sobe a API REST/WebSocket com o Uvicorn")

    geocode = subparsers.add_parser("geocode", help="Geocodifica um nome de lugar")
    geocode.add_argument("name", help="Nome do lugar, ex.: 'Manhattan, NYC'")

    reverse = subparsers.add_parser(
        "reverse-geocode", help="Converte coordenadas em endereço"
    )
    reverse.add_argument("lat", type=float, help="Latitude em graus decimais")
    reverse.add_argument("lng", type=float, help="Longitude em graus decimais")

    extract = subparsers.add_parser(
        "extract-locations", help="Extrai nomes de lugares de um texto livre"
    )
    extract.add_argument("text", help="Texto a analisar")

    subparsers.add_parser("sweep-cache", help="Remove as entradas expiradas do cache")
    subparsers.add_parser("list-users", help="Lista os usuários conhecidos e permissões")

    return parser.parse_args(argv)


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    container: Optional[SocorroContainer] = None,
    console: Optional[Console] = None,
) -> None:
    load_dotenv()
    args = parse_args(argv)
    console = console or Console()
    configure_logging(args.log_level or os.getenv("LOG_LEVEL", "INFO"), console=console)
    logger = logging.getLogger("socorro.cli")

    if args.command == "serve":
        from socorro.api import run

        run()
        return

    container = container or build_container()
    try:
        if args.command == "geocode":
            try:
                result = container.geocoding.geocode(args.name)
            except ValueError as exc:
                console.print(f"[red]{exc}[/red]")
                sys.exit(1)
            console.print_json(data=result.to_mapping())
        elif args.command == "reverse-geocode":
            try:
                address = container.geocoding.reverse(args.lat, args.lng)
            except ValueError as exc:
                console.print(f"[red]{exc}[/red]")
                sys.exit(1)
            console.print_json(data=address.to_mapping())
        elif args.command == "extract-locations":
            extraction = container.ai.extract_locations(args.text)
            if not extraction.locations:
                console.print("[yellow]Nenhum lugar encontrado no texto.[/yellow]")
            console.print_json(data=extraction.to_mapping())
        elif args.command == "sweep-cache":
            removed = container.cache.clear_expired()
            console.print(f"[green]{removed} entrada(s) expirada(s) removida(s) do cache.[/green]")
        elif args.command == "list-users":
            table = Table(title="Usuários")
            table.add_column("id", style="bold")
            table.add_column("papel")
            table.add_column("permissões")
            for user in container.authenticator.users:
                table.add_row(user.id, user.role, ", ".join(sorted(user.permissions)))
            console.print(table)
        else:
            raise ValueError(f"Comando desconhecido: {args.command}")
    finally:
        logger.debug("encerrando clientes do container")
        container.close()


if __name__ == "__main__":
    main()
