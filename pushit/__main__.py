import sys

from pushit.cli.main import main

sys.exit(main())
