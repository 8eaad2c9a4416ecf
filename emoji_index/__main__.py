# emoji_index/__main__.py
import sys

from emoji_index.cli import main

if __name__ == "__main__":
    sys.exit(main())
