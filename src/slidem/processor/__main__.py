import sys

from slidem.processor.cli import main

sys.exit(main())
