import sys

from feed_merger.cli import main

sys.exit(main())
