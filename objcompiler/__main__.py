import sys

from objcompiler.cli import main

sys.exit(main())
