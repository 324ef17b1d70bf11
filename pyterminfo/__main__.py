import os
import sys

# Enable importing also if not installed
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


import pyterminfo


if __name__ == "__main__":
    sys.exit(pyterminfo.cli())
