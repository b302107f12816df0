"""Allow `python -m miniblog`."""

import sys

from miniblog.cli import main

sys.exit(main())
