"""Allow ``python -m vgraph``."""

from vgraph.cli import main

if __name__ == "__main__":
    main()
