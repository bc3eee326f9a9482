"""Command-line client: analyze a statement, print it, then chat about it."""

from __future__ import annotations

import argparse
import asyncio
import json

from .client import AppState, IngestionStateMachine, StatementApiClient
from .core.config import ClientSettings
from .core.exceptions import StatementLensError
from .core.logging import configure_logging
from .schemas.statement import Language

EXIT_COMMANDS = {"exit", "quit", ":q"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="statement-lens", description=__doc__)
    parser.add_argument("statement", help="Path to the monthly POS statement PDF")
    parser.add_argument("--lang", choices=[language.value for language in Language], default="en")
    parser.add_argument("--api-url", default=None, help="Base URL of the proxy endpoints")
    parser.add_argument("--no-chat", action="store_true", help="Print the analysis and exit")
    parser.add_argument("--log-level", default="WARNING")
    return parser


async def run(args: argparse.Namespace) -> int:
    settings = ClientSettings(api_url=args.api_url) if args.api_url else ClientSettings()
    api = StatementApiClient(settings)
    async with api.lifecycle():
        machine = IngestionStateMachine(api, lang=args.lang)
        try:
            await machine.select_file(args.statement)
        except StatementLensError as exc:
            print(exc.message)
            return 2

        await machine.analyze()
        if machine.app_state is AppState.ERROR:
            print(machine.error_message)
            return 1

        statement = machine.statement
        if statement is None:
            return 1
        print(json.dumps(statement.model_dump(), indent=2, ensure_ascii=False))
        if args.no_chat:
            return 0

        while True:
            try:
                question = await asyncio.to_thread(input, "> ")
            except EOFError:
                break
            if question.strip().lower() in EXIT_COMMANDS:
                break
            reply = await machine.conversation.send(question, lang=args.lang)
            if reply is not None:
                print(reply.content)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    return asyncio.run(run(args))


if __name__ == "__main__":
    raise SystemExit(main())
