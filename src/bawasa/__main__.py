"""Runs the API server with ``python -m bawasa``."""

from bawasa.main import main

main()
