"""
Test suite for ndconstruct.

Covers the discovery core (type lattice, scalar classification, depth, shape
and type discovery), the NumPy storage engine, the construction entry points
and the command line tool.
"""
