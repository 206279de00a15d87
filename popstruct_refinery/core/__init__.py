"""Core computational modules for PopStruct-Refinery.

This package contains the main analysis engines:
- multires: level-by-level refinement of sample clusters
- baps: default Bayesian partition oracle
"""
