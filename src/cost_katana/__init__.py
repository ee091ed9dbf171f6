"""cost-katana: command-line client for the Cost Katana cost-tracking backend."""

# Version - should match pyproject.toml
__version__ = "0.1.0"
