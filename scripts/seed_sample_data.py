#!/usr/bin/env python3
"""Seed sample products for local development."""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from catalog import create_app
from catalog.seed import seed_demo

app = create_app()


def seed():
    with app.app_context():
        seed_demo()


if __name__ == "__main__":
    seed()
