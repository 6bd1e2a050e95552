"""Module entrypoint for ``python -m imgtriage``."""

from .cli import main


if __name__ == "__main__":
    main()
