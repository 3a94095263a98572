"""typst-review — vet community package submissions locally.

Checks out a pull request of the package repository, installs the submitted
packages into the local package cache, and compiles their templates.
"""

__version__ = "0.1.0"
