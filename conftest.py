"""Global pytest configuration."""

import os

# Tests run against in-memory repositories unless a fixture wires SQL explicitly
os.environ["DATABASE_URL"] = ""
