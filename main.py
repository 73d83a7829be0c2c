#!/usr/bin/env python3
"""LoopTimer entry point.

Run with:
    python main.py
    python -m looptimer
"""

from looptimer.__main__ import main


if __name__ == "__main__":
    main()
