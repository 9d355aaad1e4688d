"""Package entry point for ``python -m auto_subtitles``.

WHY: Users run the tool as ``python -m auto_subtitles input.mp4``. Python's
``-m`` flag looks for ``__main__.py`` inside the package and executes it.

HOW: Delegates to the CLI's main() and exits with its return code.
"""

import sys

if __name__ == "__main__":
    from auto_subtitles.cli import main
    sys.exit(main())
