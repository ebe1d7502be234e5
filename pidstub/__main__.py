import sys

from pidstub.cli.stub import main

if __name__ == "__main__":
    sys.exit(main())
