"""Stand-in for an external build tool.

Appends a JSON record of its argv, cwd and selected environment variables to
$FAKE_TOOL_LOG, then exits with $FAKE_TOOL_EXIT (default 0).
"""

import json
import os
import sys


def main() -> int:
    record = {
        "argv": sys.argv[1:],
        "cwd": os.getcwd(),
        "env": {k: v for k, v in os.environ.items() if k.startswith("RB_")},
    }
    log = os.environ.get("FAKE_TOOL_LOG")
    if log:
        with open(log, "a", encoding="utf-8") as f:
            f.write(json.dumps(record) + "\n")
    return int(os.environ.get("FAKE_TOOL_EXIT", "0"))


if __name__ == "__main__":
    sys.exit(main())
