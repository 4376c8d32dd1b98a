# Path: usi-svc/usi_main.py
from __future__ import annotations
import argparse

from engines.mock_engine import MockEngine

def main(argv=None):
    parser = argparse.ArgumentParser(description="Stand-in USI engine (lookup-table moves)")
    parser.parse_args(argv)

    MockEngine().usi_loop()

if __name__ == "__main__":
    main()
