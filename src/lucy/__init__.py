"""lucy - comment-driven annotation processor for C sources.

Functions are marked with comments such as ``// @Test("adds")``; lucy
wraps annotated functions in ``#ifdef`` guards and generates a table of
every annotated function that programs can query by annotation name.
"""

__version__ = "0.1.0"
