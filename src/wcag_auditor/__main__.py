import sys

from wcag_auditor.app import main

sys.exit(main())
