"""
tests/conftest.py

Minimal, safe env defaults so importing `config` and `database` never needs
a running MongoDB.
"""

import os
import sys
from pathlib import Path

# Ensure safe, isolated test environment variables (no external IO)
os.environ.setdefault('DISABLE_DB', '1')
os.environ.setdefault('MONGODB_URL', 'mongodb://localhost:27017/test')

# Prefer the project root (parent of tests dir) on sys.path to avoid
# shadowing by unrelated top-level packages
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))
