import sys

from recordstore.cli import main

sys.exit(main())
