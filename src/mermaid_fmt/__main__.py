"""Allow ``python -m mermaid_fmt``."""

import sys

from mermaid_fmt.cli import main

sys.exit(main())
