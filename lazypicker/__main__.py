"""Module entrypoint for ``python -m lazypicker``.

Argument parsing and session setup happen in ``lazypicker.cli``.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
