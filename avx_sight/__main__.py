"""Entry point for running avx-sight as a module.

This allows the package to be executed as:
    python -m avx_sight

It delegates to the CLI main function.
"""

from avx_sight.cli.main import main

if __name__ == "__main__":
    main()
