import sys

from tunedir.cli import main

sys.exit(main())
