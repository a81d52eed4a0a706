"""Recursive include expansion.

`expand` walks one file and splices its includes depth-first into a shared
output sink; `run` owns the top-level input/output files around it.
"""
