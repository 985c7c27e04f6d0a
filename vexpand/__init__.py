"""Shell-style variable expansion over text streams and files, with parameter operators, in-place file rewriting and KEY=VALUE variable files."""

__version__ = "0.1.0"