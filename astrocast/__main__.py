import sys

from astrocast.cli import main

sys.exit(main())
