import sys

from bunsen_rebuilder.main import main

sys.exit(main())
