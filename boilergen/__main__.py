"""Allow ``python -m boilergen``."""

from boilergen.cli import main

if __name__ == "__main__":
    main()
