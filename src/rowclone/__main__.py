import sys

from rowclone.cli import main

sys.exit(main())
