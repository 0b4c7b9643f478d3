"""Application package initializer.

Ensures the local ``classroom`` package resolves as a regular package instead
of a namespace package assembled from unrelated distributions.
"""
