"""AWS implementation of the remote role client."""

from .iam import IAM

__all__ = ["IAM"]
