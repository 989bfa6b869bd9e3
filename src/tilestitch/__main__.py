import sys

from tilestitch.main import main

sys.exit(main())
