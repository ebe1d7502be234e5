import sys

from pidstub.cli.stub import main_wait

if __name__ == "__main__":
    sys.exit(main_wait())
