#!/usr/bin/env python3
"""
Create all tables for a fresh database (local/dev bootstrap; migrations are out of scope).
Run from the project root: python -m scripts.init_db
or: PYTHONPATH=. python scripts/init_db.py
"""
import os
import sys

# project root on PYTHONPATH
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from eventmarketers import models  # noqa: F401,E402  registers tables on Base.metadata
from eventmarketers.db.base import Base  # noqa: E402
from eventmarketers.db.session import engine  # noqa: E402


def main():
    Base.metadata.create_all(engine)
    for name in sorted(Base.metadata.tables):
        print(f"  {name}")
    print(f"Tables ready on {engine.url.render_as_string(hide_password=True)}")


if __name__ == "__main__":
    main()
