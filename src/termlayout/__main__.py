"""Allow ``python -m termlayout``."""

from .cli_entry import main

if __name__ == "__main__":
    main(prog_name="termlayout")
