"""Allow running as ``python -m reusable_workflows``."""

from reusable_workflows.cli import main

main()
