"""Entry point for ``python -m agentboard``."""

from agentboard.cli import main

main()
