# tests/conftest.py
import os
import sys

# Ensure bugpattern is importable without an install
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
