"""
Allows running the CLI with `python -m multipost`.
"""

from multipost.cli import entrypoint

if __name__ == "__main__":
    entrypoint()
