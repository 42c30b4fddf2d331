"""Package entry point for ``python -m transcript_sync``.

WHY: Users who run from a source checkout (no console script installed)
still need a single command to inspect a caption file.

HOW: Delegates to the CLI's main() and exits with its return code.

RULES:
- This file must exist for ``python -m transcript_sync`` to work
- Exit code comes from cli.main() (0 ok, 1 no content, 2 load failure)
"""

import sys

if __name__ == "__main__":
    from transcript_sync.cli import main
    sys.exit(main())
