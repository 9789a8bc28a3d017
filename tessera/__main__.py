"""Entry point for Tessera."""

import logging

from tessera.app import TesseraApp


def main() -> None:
    # The TUI owns the terminal, so log warnings to a file instead
    logging.basicConfig(
        filename="tessera.log",
        level=logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = TesseraApp()
    app.run()


if __name__ == "__main__":
    main()
