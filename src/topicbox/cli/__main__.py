"""CLI entry point for topicbox.cli module.

Enables execution via: python -m topicbox.cli
"""

from topicbox.cli.export_entries import main

if __name__ == "__main__":
    main()
