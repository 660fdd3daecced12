import sys

from opcreds.cli import main

sys.exit(main())
