"""Entry point for `python -m delta_cli` and the `delta-engine` console script."""

from __future__ import annotations

from delta_cli.app import app


def main() -> None:
    app()


if __name__ == "__main__":
    main()
