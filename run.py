import sys

from resource_sim.cli import main


if __name__ == "__main__":
    main(sys.argv[1:])
