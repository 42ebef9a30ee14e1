import sys

from arcade_backend.cli import main

sys.exit(main())
