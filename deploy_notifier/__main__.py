import sys

from deploy_notifier.app import main

if __name__ == "__main__":
    sys.exit(main())
