"""Package entry point for ``python -m realtime_log``.

WHY: Users inspect a log file with ``python -m realtime_log session.log``.
Python's ``-m`` flag looks for ``__main__.py`` inside the package and
executes it.

HOW: Delegates to the CLI's main() function.
"""

from realtime_log.cli import main

if __name__ == "__main__":
    main()
