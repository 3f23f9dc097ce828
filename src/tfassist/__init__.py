"""tfassist - Local-first Terraform assistant."""

__version__ = "0.1.0"
