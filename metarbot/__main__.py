import sys

from metarbot.cli import main

sys.exit(main())
