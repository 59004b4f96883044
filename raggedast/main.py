"""
The main entry point for raggedast.
"""
import sys
import logging

from .lexicon.lexical_tables import LexicalTables


def main():
    """Loads the lexical tables and runs the command-line interface."""
    log = logging.getLogger("raggedast")

    # Load word, month and unit tables from JSON
    LexicalTables.load_tables()

    try:
        from .cli import run_cli
        exit_code = run_cli()
    except Exception:
        log.exception("A critical error occurred while running the CLI.")
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == '__main__':
    main()
