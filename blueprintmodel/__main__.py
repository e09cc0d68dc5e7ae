import sys

from blueprintmodel.walkthrough import main

sys.exit(main())
