import sys

from cavefinder.cli import main


if __name__ == "__main__":
    sys.exit(main(prog="main.py"))
