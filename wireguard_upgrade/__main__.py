import sys

from wireguard_upgrade.run import main

sys.exit(main())
