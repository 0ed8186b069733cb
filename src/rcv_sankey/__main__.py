import sys

from rcv_sankey.cli import main

sys.exit(main())
