"""Entry point for tiempo CLI client."""

import argparse
import sys

from core.config import DIFFICULTIES, DEFAULT_DIFFICULTY, SCORING_MODES
from core.lexicon import validate_lexicon
from core.scoring import check_special_dispatch
from cli.api_client import TiempoAPIClient
from cli.console import ConsoleUI
from cli.local_backend import LocalBackend


def main():
    parser = argparse.ArgumentParser(description='Tiempo - Spanish tense drills')
    parser.add_argument(
        '--server',
        default='http://localhost:8000',
        help='Server URL (default: http://localhost:8000)'
    )
    parser.add_argument(
        '--user',
        default='default',
        help='User ID (default: default)'
    )
    parser.add_argument(
        '--difficulty',
        choices=DIFFICULTIES,
        default=DEFAULT_DIFFICULTY,
        help=f'Draw difficulty (default: {DEFAULT_DIFFICULTY})'
    )
    parser.add_argument(
        '--mode',
        choices=SCORING_MODES,
        default=None,
        help='Scoring mode (default: keep the session mode)'
    )
    parser.add_argument('--ollama-url', default=None, help='Ollama URL for local AI scoring')
    parser.add_argument('--ollama-model', default=None, help='Ollama model for local AI scoring')
    parser.add_argument(
        '--local',
        action='store_true',
        help='Deal and score rounds in-process; the server is only used for cloud scoring'
    )
    args = parser.parse_args()

    validate_lexicon()
    check_special_dispatch()

    client = TiempoAPIClient(base_url=args.server, user_id=args.user)
    if args.local:
        backend = LocalBackend(client, args.difficulty, args.mode or 'offline',
                               args.ollama_url, args.ollama_model)
    else:
        backend = client
        try:
            backend.new_draw(args.difficulty)
        except Exception as e:
            print(f"Error: Cannot connect to server at {args.server} ({e})")
            sys.exit(1)
    ui = ConsoleUI(backend, args.mode, args.ollama_url, args.ollama_model)

    try:
        ui.run()
    except KeyboardInterrupt:
        print('\nGoodbye!')
        sys.exit(0)


if __name__ == '__main__':
    main()
