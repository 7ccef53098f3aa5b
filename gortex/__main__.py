import sys

from gortex.cli.main import main

sys.exit(main())
