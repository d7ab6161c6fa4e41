"""Cluster network convergence — VPC discovery and security group reconciliation."""

__version__ = "0.1.0"
