"""Allow running quickref as ``python -m quickref``."""

from quickref.cli import main

if __name__ == "__main__":
    main()
