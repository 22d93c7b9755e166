# main.py
import os
import sys

# Run from a source checkout without installing: make the 'walkers'
# package beside this file importable.
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from walkers.launcher import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
