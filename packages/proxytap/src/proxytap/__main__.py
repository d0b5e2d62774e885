"""Run proxytap with ``python -m proxytap``."""

from proxytap import main

if __name__ == "__main__":
    main()
