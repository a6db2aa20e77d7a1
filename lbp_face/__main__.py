"""Entry point for running the package as a module.

Usage:
    python -m lbp_face recognize --image photo.jpg
"""

from .cli import main

if __name__ == "__main__":
    main()
