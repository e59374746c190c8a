#!/usr/bin/env python3
"""Run the tiempo API server."""

import argparse

import uvicorn


def main(argv=None):
    parser = argparse.ArgumentParser(description='Tiempo API server')
    parser.add_argument('--host', default='0.0.0.0', help='Bind address (default: 0.0.0.0)')
    parser.add_argument('--port', type=int, default=8000, help='Port (default: 8000)')
    parser.add_argument('--no-reload', action='store_true', help='Disable auto-reload on code changes')
    args = parser.parse_args(argv)

    print(f"Tiempo drills: API docs at http://localhost:{args.port}/docs")
    uvicorn.run(
        "server.app:app",
        host=args.host,
        port=args.port,
        reload=not args.no_reload
    )


if __name__ == "__main__":
    main()
