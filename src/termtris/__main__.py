"""Play in the terminal.

Run with: `python -m termtris`
"""

from __future__ import annotations

from .run_terminal import main


if __name__ == "__main__":
    main()
