"""Reconciliation core: inventory, mirror sync, classification, planning, execution."""
