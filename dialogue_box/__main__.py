"""Package entry point for ``python -m dialogue_box``."""

from dialogue_box.cli import main

if __name__ == "__main__":
    main()
