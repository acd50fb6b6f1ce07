"""Main entry point when executing streamtape as a package.

This allows running the package using python -m streamtape.
"""

from streamtape.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
