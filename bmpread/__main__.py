import sys

from bmpread.viewer import main

sys.exit(main())
