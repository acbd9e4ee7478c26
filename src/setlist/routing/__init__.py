"""Routing: ordered route table with specificity-ranked matching.

Routes are registered during setup and frozen into a read-only table
when the app freezes.
"""
