import sys

from wbs_builder.cli import main

sys.exit(main())
